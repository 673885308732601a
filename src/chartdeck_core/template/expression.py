"""Bounded expression interpreter for template placeholders.

Placeholder code is parsed with Python's expression grammar and walked node by
node. Nothing is compiled or executed by the host interpreter. Supported:

- literals: strings, numbers, True/False/None and the aliases true/false/null
- names: ``datasets`` and ``props``
- member access and indexing, with the same read rules as path resolution
- arithmetic ``+ - * / // %``, unary ``- + not``
- comparisons (including ``in`` / ``is``), ``and`` / ``or``, ``a if c else b``
- list and tuple literals
- calls to the allowlisted helpers (count, sum, avg, min, max, formatNumber,
  formatPercent, formatCurrency) with positional arguments

There are no loops, comprehensions, lambdas or exponentiation, so evaluation
always terminates.
"""

import ast
import operator
from collections.abc import Callable
from numbers import Number
from typing import Any

from chartdeck_core.errors import create_error

from .functions import FUNCTION_NAMES, create_helpers
from .paths import is_forbidden_key, read_index, read_member
from .types import TemplateContext

CONSTANTS: dict[str, Any] = {"true": True, "false": False, "null": None}

BINARY_OPERATORS: dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

UNARY_OPERATORS: dict[type, Callable[[Any], Any]] = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Not: operator.not_,
}

COMPARE_OPERATORS: dict[type, Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}

ALLOWED_NODES: frozenset[type] = frozenset(
    {
        ast.Expression,
        ast.Constant,
        ast.Name,
        ast.Load,
        ast.Attribute,
        ast.Subscript,
        ast.BinOp,
        ast.UnaryOp,
        ast.BoolOp,
        ast.And,
        ast.Or,
        ast.Compare,
        ast.IfExp,
        ast.Call,
        ast.List,
        ast.Tuple,
        *BINARY_OPERATORS,
        *UNARY_OPERATORS,
        *COMPARE_OPERATORS,
    }
)

CONSTANT_TYPES = (str, int, float, bool, type(None))


def _is_number(value: Any) -> bool:
    return isinstance(value, Number)


class ExpressionEvaluator:
    """Evaluate placeholder code against a TemplateContext.

    Example:
        >>> evaluator = ExpressionEvaluator()
        >>> evaluator.evaluate("formatCurrency(sum('sales', 'amount'))", context)
        '$350.00'
    """

    def parse(self, code: str) -> ast.Expression:
        """Parse and validate expression code.

        Args:
            code: Expression source

        Returns:
            Validated expression tree

        Raises:
            ChartdeckError(TEMPLATE_SYNTAX) if the code does not parse
            ChartdeckError(EXPRESSION_UNSUPPORTED) for constructs outside the grammar
            ChartdeckError(FUNCTION_NOT_ALLOWED) for calls to other functions
        """
        try:
            # Parenthesized so expressions may span lines
            tree = ast.parse(f"({code.strip()}\n)", mode="eval")
        except SyntaxError as e:
            raise create_error(
                "TEMPLATE_SYNTAX",
                expression=code,
                detail=f"{e.msg} (offset {e.offset})",
            ) from e

        self._validate(tree, code)
        return tree

    def validate(self, code: str) -> list[str]:
        """Validate expression code without evaluating it.

        Returns:
            List of error messages (empty if valid)
        """
        try:
            self.parse(code)
        except Exception as e:  # noqa: BLE001 - reported, not raised
            return [f"{e}: {code.strip()}"]
        return []

    def evaluate(self, code: str, context: TemplateContext) -> Any:
        """Evaluate expression code.

        Args:
            code: Expression source
            context: Template context

        Returns:
            Evaluated value

        Raises:
            ChartdeckError for grammar, name and access violations; ordinary
            Python exceptions (TypeError, ZeroDivisionError, ...) for runtime
            failures
        """
        tree = self.parse(code)
        scope = _Scope(context, code)
        return scope.eval(tree.body)

    def _validate(self, tree: ast.Expression, code: str) -> None:
        for node in ast.walk(tree):
            if type(node) not in ALLOWED_NODES:
                raise create_error(
                    "EXPRESSION_UNSUPPORTED",
                    construct=type(node).__name__,
                    expression=code,
                )
            if isinstance(node, ast.Constant) and not isinstance(node.value, CONSTANT_TYPES):
                raise create_error(
                    "EXPRESSION_UNSUPPORTED",
                    construct=type(node.value).__name__,
                    expression=code,
                )
            if isinstance(node, ast.Call):
                self._validate_call(node, code)

    def _validate_call(self, node: ast.Call, code: str) -> None:
        if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTION_NAMES:
            name = node.func.id if isinstance(node.func, ast.Name) else ast.unparse(node.func)
            raise create_error(
                "FUNCTION_NOT_ALLOWED",
                function_name=name,
                allowed_functions=", ".join(FUNCTION_NAMES),
                expression=code,
            )
        if node.keywords:
            raise create_error(
                "EXPRESSION_UNSUPPORTED",
                construct="keyword arguments",
                expression=code,
            )


class _Scope:
    """Evaluation state for one expression."""

    def __init__(self, context: TemplateContext, code: str):
        self.code = code
        self.names: dict[str, Any] = {
            "datasets": context.datasets,
            "props": context.props,
            **CONSTANTS,
        }
        self.helpers = create_helpers(context)

    def eval(self, node: ast.AST) -> Any:
        handler = getattr(self, f"_eval_{type(node).__name__}")
        return handler(node)

    def _eval_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def _eval_Name(self, node: ast.Name) -> Any:
        if node.id in self.names:
            return self.names[node.id]
        raise create_error("NAME_UNDEFINED", name=node.id, expression=self.code)

    def _check_key(self, key: str) -> None:
        if is_forbidden_key(key):
            raise create_error("FORBIDDEN_ACCESS", key=key, expression=self.code)

    def _eval_Attribute(self, node: ast.Attribute) -> Any:
        self._check_key(node.attr)
        return read_member(self.eval(node.value), node.attr)

    def _eval_Subscript(self, node: ast.Subscript) -> Any:
        target = self.eval(node.value)
        key = self.eval(node.slice)
        if isinstance(key, bool):
            return None
        if isinstance(key, int):
            return read_index(target, key)
        if isinstance(key, str):
            self._check_key(key)
            return read_member(target, key)
        return None

    def _eval_BinOp(self, node: ast.BinOp) -> Any:
        left = self.eval(node.left)
        right = self.eval(node.right)
        op_type = type(node.op)
        # Only + works on sequences; everything else is numeric
        if op_type is not ast.Add and not (_is_number(left) and _is_number(right)):
            raise TypeError(
                f"unsupported operand types for {op_type.__name__}: "
                f"{type(left).__name__} and {type(right).__name__}"
            )
        return BINARY_OPERATORS[op_type](left, right)

    def _eval_UnaryOp(self, node: ast.UnaryOp) -> Any:
        return UNARY_OPERATORS[type(node.op)](self.eval(node.operand))

    def _eval_BoolOp(self, node: ast.BoolOp) -> Any:
        value: Any = None
        for operand in node.values:
            value = self.eval(operand)
            if isinstance(node.op, ast.And) and not value:
                return value
            if isinstance(node.op, ast.Or) and value:
                return value
        return value

    def _eval_Compare(self, node: ast.Compare) -> bool:
        left = self.eval(node.left)
        for op, comparator in zip(node.ops, node.comparators, strict=True):
            right = self.eval(comparator)
            if not COMPARE_OPERATORS[type(op)](left, right):
                return False
            left = right
        return True

    def _eval_IfExp(self, node: ast.IfExp) -> Any:
        return self.eval(node.body) if self.eval(node.test) else self.eval(node.orelse)

    def _eval_Call(self, node: ast.Call) -> Any:
        helper = self.helpers[node.func.id]  # type: ignore[attr-defined]
        return helper(*(self.eval(arg) for arg in node.args))

    def _eval_List(self, node: ast.List) -> list[Any]:
        return [self.eval(item) for item in node.elts]

    def _eval_Tuple(self, node: ast.Tuple) -> tuple[Any, ...]:
        return tuple(self.eval(item) for item in node.elts)
