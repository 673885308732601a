"""Number formatters and value stringification for rendered text."""

import dataclasses
import json
import math
import re
from typing import Any

from .datasets import Dataset, to_number

# Fraction digits shown by the grouped default format
DEFAULT_MAX_FRACTION_DIGITS = 3
MAX_FRACTION_DIGITS = 100

EXPONENT_PADDING = re.compile(r"e([+-])0+(?=\d)")


def _fraction_digits(value: Any, default: int | None) -> int | None:
    """Accept a non-negative integral digit count, else fall back to default."""
    number = to_number(value)
    if number is None or not float(number).is_integer():
        return default
    digits = int(number)
    return digits if 0 <= digits <= MAX_FRACTION_DIGITS else default


def _grouped(number: float | int, min_fraction: int, max_fraction: int) -> str:
    """en-US style grouping: 1234.5 → '1,234.5'."""
    if isinstance(number, int) and min_fraction == 0:
        return f"{number:,}"
    text = f"{number:,.{max_fraction}f}"
    if max_fraction > min_fraction and "." in text:
        whole, fraction = text.split(".")
        fraction = fraction.rstrip("0").ljust(min_fraction, "0")
        text = f"{whole}.{fraction}" if fraction else whole
    return text


def format_number(value: Any, digits: Any = None) -> str | None:
    """Format a number as fixed-point or grouped text.

    Args:
        value: Number or numeric string
        digits: Non-negative integer for fixed-point output

    Returns:
        Formatted text, or None if value is not numeric
    """
    number = to_number(value)
    if number is None:
        return None
    fixed = _fraction_digits(digits, None)
    if fixed is not None:
        return f"{number:.{fixed}f}"
    return _grouped(number, 0, DEFAULT_MAX_FRACTION_DIGITS)


def format_percent(value: Any, digits: Any = 1) -> str | None:
    """Format a ratio as a percentage: 0.256 → '25.6%'."""
    number = to_number(value)
    if number is None:
        return None
    fixed = _fraction_digits(digits, 1)
    return f"{number * 100:.{fixed}f}%"


def format_currency(value: Any, symbol: Any = "$", digits: Any = 2) -> str | None:
    """Format an amount with a currency symbol: 1234.5 → '$1,234.50'."""
    number = to_number(value)
    if number is None:
        return None
    prefix = symbol if isinstance(symbol, str) else "$"
    fixed = _fraction_digits(digits, 2)
    return f"{prefix}{_grouped(number, fixed, fixed)}"


def number_text(number: float | int) -> str:
    """Canonical text for a number: integral floats drop the fraction."""
    if isinstance(number, int):
        return str(number)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))
    # 1e-07 -> 1e-7
    return EXPONENT_PADDING.sub(r"e\1", repr(number))


def _json_default(value: Any) -> Any:
    if isinstance(value, Dataset):
        return value.to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def stringify_value(value: Any) -> str:
    """Convert an evaluated value to the text substituted into a template.

    Args:
        value: Evaluation result

    Returns:
        '' for None, the string itself, true/false for booleans, canonical
        number text, otherwise compact JSON (falling back to str())
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return number_text(value)
    try:
        return json.dumps(value, separators=(",", ":"), default=_json_default)
    except (TypeError, ValueError):
        return str(value)
