"""Argument splitting and literal parsing for allowlisted function calls."""

import re
from typing import Any

from .paths import resolve_path
from .types import TemplateContext

NUMBER_PATTERN = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")

KEYWORDS: dict[str, Any] = {"true": True, "false": False, "null": None}


def split_args(arg_string: str) -> list[str]:
    """Split an argument list on top-level commas.

    Commas inside single or double quotes do not separate arguments. A
    backslash and the character after it are copied through together, so an
    escaped quote or comma loses its meaning. Empty arguments are dropped.

    Args:
        arg_string: Text between the call parentheses

    Returns:
        Trimmed raw argument strings
    """
    args: list[str] = []
    current: list[str] = []
    in_single = False
    in_double = False

    i = 0
    while i < len(arg_string):
        ch = arg_string[i]

        if ch == "\\" and i + 1 < len(arg_string):
            current.append(arg_string[i : i + 2])
            i += 2
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "," and not in_single and not in_double:
            token = "".join(current).strip()
            if token:
                args.append(token)
            current = []
            i += 1
            continue

        current.append(ch)
        i += 1

    token = "".join(current).strip()
    if token:
        args.append(token)
    return args


def unquote(raw: str) -> str | None:
    """Return the unescaped content of a fully quoted token, else None."""
    if len(raw) < 2 or raw[0] not in "'\"" or raw[-1] != raw[0]:
        return None
    quote = raw[0]
    inner = raw[1:-1]
    return inner.replace("\\" + quote, quote).replace("\\\\", "\\")


def parse_literal_or_path(raw: str, context: TemplateContext) -> Any:
    """Classify one raw argument as a literal or a data path.

    Args:
        raw: Raw argument text
        context: Template context for path arguments

    Returns:
        str, int, float, bool or None for literals; the resolved value (or
        None) for paths
    """
    text = raw.strip()

    quoted = unquote(text)
    if quoted is not None:
        return quoted

    if NUMBER_PATTERN.fullmatch(text):
        return float(text) if "." in text else int(text)

    if text in KEYWORDS:
        return KEYWORDS[text]

    return resolve_path(context.root(), text)
