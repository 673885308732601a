"""Template scanning and static analysis utilities."""

import ast
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from .functions import parse_call
from .paths import tokenize_path

OPEN = "{{"
CLOSE = "}}"

# Helpers whose first argument names a dataset
DATASET_FUNCTIONS = frozenset({"count", "sum", "avg", "min", "max"})
ROOT_NAMES = ("datasets", "props")


@dataclass(frozen=True)
class Segment:
    """Piece of a scanned template: literal text or placeholder code."""

    text: str  # Literal text, or the raw code between {{ and }}
    is_placeholder: bool = False

    @property
    def code(self) -> str:
        return self.text.strip()


def scan_template(text: str) -> Iterator[Segment]:
    """Split a template into literal and placeholder segments.

    Scanning copies text until ``{{``, then reads placeholder code up to the
    first following ``}}``. Placeholders do not nest. When a ``{{`` has no
    closing ``}}`` the rest of the text, including the ``{{``, is literal.

    Args:
        text: Template text

    Yields:
        Segments in order; joining literal text and rendered placeholders
        rebuilds the output
    """
    pos = 0
    while True:
        start = text.find(OPEN, pos)
        if start == -1:
            break
        end = text.find(CLOSE, start + len(OPEN))
        if end == -1:
            break
        if start > pos:
            yield Segment(text[pos:start])
        yield Segment(text[start + len(OPEN) : end], is_placeholder=True)
        pos = end + len(CLOSE)

    if pos < len(text):
        yield Segment(text[pos:])


def extract_templates(text: str) -> list[str]:
    """Extract all placeholder expressions from text (trimmed, without braces)."""
    return [segment.code for segment in scan_template(text) if segment.is_placeholder]


def has_templates(text: str) -> bool:
    """Check if text contains at least one complete placeholder."""
    return any(segment.is_placeholder for segment in scan_template(text))


def validate_syntax(text: str, validator: Callable[[str], list[str]]) -> list[str]:
    """Validate every placeholder in text with an evaluator's validator.

    Args:
        text: Template text
        validator: Function returning error messages for one expression

    Returns:
        List of error messages (empty if valid)
    """
    errors: list[str] = []
    for code in extract_templates(text):
        if code:
            errors.extend(validator(code))
    return errors


def _chain_reference(node: ast.AST) -> str | None:
    """Reference for a member chain rooted at datasets/props, e.g. 'datasets.sales'."""
    parts: list[str] = []
    while isinstance(node, (ast.Attribute, ast.Subscript)):
        if isinstance(node, ast.Attribute):
            parts.append(node.attr)
        elif isinstance(node.slice, ast.Constant) and isinstance(node.slice.value, str):
            parts.append(node.slice.value)
        else:
            parts.clear()
        node = node.value
    if isinstance(node, ast.Name) and node.id in ROOT_NAMES and parts:
        return f"{node.id}.{parts[-1]}"
    return None


def _expression_references(code: str) -> list[str] | None:
    try:
        tree = ast.parse(f"({code}\n)", mode="eval")
    except SyntaxError:
        return None

    references: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, (ast.Attribute, ast.Subscript)):
            ref = _chain_reference(node)
            if ref:
                references.append(ref)
        elif (
            isinstance(node, ast.Call)
            and isinstance(node.func, ast.Name)
            and node.func.id in DATASET_FUNCTIONS
            and node.args
            and isinstance(node.args[0], ast.Constant)
            and isinstance(node.args[0].value, str)
        ):
            references.append(f"datasets.{node.args[0].value}")
    return references


def _allowlisted_references(code: str) -> list[str]:
    call = parse_call(code)
    if call is not None:
        name, raw_args = call
        if name in DATASET_FUNCTIONS and raw_args and raw_args[0][:1] in ("'", '"'):
            return [f"datasets.{raw_args[0][1:-1]}"]
        return []
    tokens = tokenize_path(code)
    if tokens and len(tokens) > 1 and tokens[0] in ROOT_NAMES:
        return [f"{tokens[0]}.{tokens[1]}"]
    return []


def references_in(code: str) -> list[str]:
    """Data references used by one placeholder expression.

    E.g. ``formatCurrency(sum('sales', 'amount'))`` → ``["datasets.sales"]``.
    """
    references = _expression_references(code)
    if references is None:
        references = _allowlisted_references(code)
    # Nested chains report the same root more than once
    return list(dict.fromkeys(references))


def extract_all_references(value: Any) -> list[str]:
    """Extract data references from a value (recursively).

    Args:
        value: Value to extract from (str, dict, list, or primitive)

    Returns:
        Unique references in first-seen order, e.g. ["datasets.sales", "props.title"]
    """
    references: list[str] = []

    if isinstance(value, str):
        for code in extract_templates(value):
            references.extend(references_in(code))

    elif isinstance(value, dict):
        for v in value.values():
            references.extend(extract_all_references(v))

    elif isinstance(value, list):
        for item in value:
            references.extend(extract_all_references(item))

    return list(dict.fromkeys(references))
