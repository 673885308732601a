"""Template Engine for chartdeck report text."""

from .arguments import split_args
from .context import ContextBuilder
from .datasets import Dataset, KeyedRow, PositionalRow, aggregate
from .engine import TemplateEngine, get_default_engine, render_template
from .expression import ExpressionEvaluator
from .formatters import format_currency, format_number, format_percent, stringify_value
from .functions import FUNCTION_NAMES, create_helpers
from .parser import extract_templates, has_templates
from .paths import resolve_path
from .types import RenderResult, TemplateContext, TemplateSpec

__all__ = [
    "TemplateEngine",
    "get_default_engine",
    "render_template",
    "TemplateContext",
    "TemplateSpec",
    "RenderResult",
    "ContextBuilder",
    "Dataset",
    "PositionalRow",
    "KeyedRow",
    "aggregate",
    "ExpressionEvaluator",
    "create_helpers",
    "FUNCTION_NAMES",
    "format_number",
    "format_percent",
    "format_currency",
    "stringify_value",
    "extract_templates",
    "has_templates",
    "resolve_path",
    "split_args",
]
