"""Allowlisted template functions.

The same eight functions are exposed two ways:

- ``call_function`` takes raw argument strings from the call-form grammar
  ``fnName(arg, ...)`` and parses each with ``parse_literal_or_path``.
- ``create_helpers`` returns callables taking already-evaluated values, bound
  to one context, for the expression evaluators.
"""

import re
from collections.abc import Callable
from types import MappingProxyType
from typing import Any

from chartdeck_core.types import AggregateOp

from .arguments import parse_literal_or_path, split_args
from .datasets import aggregate, count_rows
from .formatters import format_currency, format_number, format_percent
from .paths import resolve_path
from .types import TemplateContext

FUNCTION_NAMES = (
    "count",
    "sum",
    "avg",
    "min",
    "max",
    "formatNumber",
    "formatPercent",
    "formatCurrency",
)

CALL_PATTERN = re.compile(r"([A-Za-z_$][A-Za-z0-9_$]*)\((.*)\)", re.DOTALL)

Helper = Callable[..., Any]


def create_helpers(context: TemplateContext) -> MappingProxyType:
    """Build the helper functions bound to one context.

    Args:
        context: Template context

    Returns:
        Read-only mapping of helper name to callable
    """

    def aggregator(op: AggregateOp) -> Helper:
        def helper(dataset_id: Any, column: Any) -> Any:
            dataset = context.get_dataset(dataset_id)
            return aggregate(dataset, column, op) if dataset is not None else None

        helper.__name__ = op.value
        return helper

    def count(dataset_id: Any) -> int:
        return count_rows(context.get_dataset(dataset_id))

    helpers: dict[str, Helper] = {
        "count": count,
        "formatNumber": format_number,
        "formatPercent": format_percent,
        "formatCurrency": format_currency,
    }
    for op in AggregateOp:
        helpers[op.value] = aggregator(op)
    return MappingProxyType(helpers)


def call_function(name: str, raw_args: list[str], context: TemplateContext) -> Any:
    """Dispatch an allowlisted call with raw argument strings.

    Missing arguments are parsed from an empty string, so they resolve to
    None. ``formatCurrency`` defaults its symbol to '$'.

    Args:
        name: Function name
        raw_args: Unparsed argument strings
        context: Template context

    Returns:
        Function result, or None for unknown functions
    """
    if name not in FUNCTION_NAMES:
        return None

    def arg(position: int, default: str = "") -> Any:
        raw = raw_args[position] if position < len(raw_args) else default
        return parse_literal_or_path(raw, context)

    helpers = create_helpers(context)

    if name == "count":
        return helpers["count"](arg(0))
    if name in ("sum", "avg", "min", "max"):
        return helpers[name](arg(0), arg(1))
    if name == "formatNumber":
        return format_number(arg(0), arg(1))
    if name == "formatPercent":
        return format_percent(arg(0), arg(1))
    return format_currency(arg(0), arg(1, "'$'"), arg(2))


def parse_call(code: str) -> tuple[str, list[str]] | None:
    """Split call-form code into function name and raw arguments."""
    match = CALL_PATTERN.fullmatch(code.strip())
    if not match:
        return None
    arg_string = match.group(2).strip()
    return match.group(1), split_args(arg_string) if arg_string else []


def evaluate_allowlisted(code: str, context: TemplateContext) -> Any:
    """Evaluate the narrow ``path | fnName(arg, ...)`` grammar.

    Never raises: unknown functions and unresolvable paths give None.

    Args:
        code: Placeholder code
        context: Template context

    Returns:
        Evaluated value
    """
    text = code.strip()
    if not text:
        return ""

    call = parse_call(text)
    if call is not None:
        name, raw_args = call
        return call_function(name, raw_args, context)

    return resolve_path(context.root(), text)
