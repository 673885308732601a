"""Unsafe expression evaluator for chartdeck templates.

WARNING: this is intentionally NOT a sandbox. Code is compiled and evaluated by
the host interpreter with the full builtins and the privileges of the calling
process. There is no timeout: an expression that never finishes blocks the
caller. Only trusted report content may reach it; TemplateEngine refuses it
unless ``allow_unsafe`` is enabled.

Bindings available to the expression:
- ``datasets`` / ``props``: context data, with attribute-style access
  (``datasets.sales.data[0][1]``)
- ``helpers`` and each helper by name: count, sum, avg, min, max,
  formatNumber, formatPercent, formatCurrency
- ``true`` / ``false`` / ``null`` aliases
"""

import ast
import builtins
from collections.abc import Mapping
from types import SimpleNamespace
from typing import Any

from chartdeck_core.template.functions import create_helpers
from chartdeck_core.template.types import TemplateContext


class AttrDict(dict):
    """dict whose keys are also readable as attributes."""

    def __getattr__(self, key: str) -> Any:
        if key in self:
            return self[key]
        raise AttributeError(key)


def wrap_data(value: Any) -> Any:
    """Recursively wrap mappings so report data reads like ``a.b.c``."""
    if isinstance(value, Mapping):
        return AttrDict({k: wrap_data(v) for k, v in value.items()})
    if isinstance(value, list):
        return [wrap_data(v) for v in value]
    return value


class UnsafeExpressionEvaluator:
    """Evaluate arbitrary Python expressions against a TemplateContext.

    Example:
        >>> evaluator = UnsafeExpressionEvaluator()
        >>> evaluator.evaluate("sum('sales', 'amount') / count('sales')", context)
        175.0
    """

    FILENAME = "<template>"

    def validate_code(self, code: str) -> list[str]:
        """Check that code is a single Python expression, without running it.

        Args:
            code: Expression source

        Returns:
            List of validation error messages (empty if valid)
        """
        try:
            ast.parse(code.strip(), filename=self.FILENAME, mode="eval")
        except SyntaxError as e:
            return [f"Syntax error at offset {e.offset}: {e.msg}"]
        return []

    def _create_globals(self, context: TemplateContext) -> dict[str, Any]:
        """Create the evaluation globals.

        Args:
            context: Template context to bind

        Returns:
            Globals dictionary with full builtins, data and helpers
        """
        helpers = create_helpers(context)
        return {
            "__builtins__": builtins,
            "datasets": wrap_data(context.datasets),
            "props": wrap_data(context.props),
            "helpers": SimpleNamespace(**helpers),
            **helpers,
            "true": True,
            "false": False,
            "null": None,
        }

    def evaluate(self, code: str, context: TemplateContext) -> Any:
        """Compile and evaluate an expression.

        Args:
            code: Python expression source
            context: Template context

        Returns:
            The expression's value

        Raises:
            SyntaxError, NameError or any exception the expression raises;
            callers are responsible for catching
        """
        compiled = compile(code.strip(), self.FILENAME, "eval")
        return eval(compiled, self._create_globals(context))  # noqa: S307
