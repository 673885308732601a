"""Chartdeck Core - Template evaluation for chartdeck reports.

Renders ``{{ }}`` placeholders in report text against loaded datasets and
report properties.
"""

# template must load before unsafe: the unsafe evaluator reuses its helpers
from chartdeck_core.template import (
    Dataset,
    TemplateContext,
    TemplateEngine,
    TemplateSpec,
    render_template,
)
from chartdeck_core.types import EvaluationMode

__version__ = "0.1.0"
__all__ = [
    "__version__",
    "TemplateEngine",
    "render_template",
    "TemplateContext",
    "TemplateSpec",
    "Dataset",
    "EvaluationMode",
]
