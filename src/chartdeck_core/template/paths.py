"""Dotted/bracketed path resolution against template data.

Paths look like ``datasets.sales.data[0][1]`` or ``props.title``. Resolution
never raises: anything that cannot be reached resolves to ``None``.
"""

import re
from collections.abc import Mapping
from typing import Any

FORBIDDEN_KEYS = frozenset({"__proto__", "prototype", "constructor"})

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
INDEX_PATTERN = re.compile(r"[0-9]+")

# Scalars have no readable properties
_SCALAR_TYPES = (str, bytes, int, float, complex, bool)


def is_forbidden_key(key: str) -> bool:
    """Check whether a member name may never be read from templates."""
    return key in FORBIDDEN_KEYS or (key.startswith("__") and key.endswith("__"))


def read_member(current: Any, key: str) -> Any:
    """Generic property read used by paths and expressions.

    - mappings: key lookup
    - lists/tuples: only ``length``
    - other objects: public, non-callable attributes (e.g. ``Dataset.columns``)

    Args:
        current: Value to read from
        key: Member name

    Returns:
        Member value, or None if absent, not readable or the read raised
    """
    if current is None or is_forbidden_key(key):
        return None
    if isinstance(current, Mapping):
        return current.get(key)
    if isinstance(current, (list, tuple)):
        return len(current) if key == "length" else None
    if isinstance(current, _SCALAR_TYPES) or key.startswith("_"):
        return None
    try:
        value = getattr(current, key, None)
    except Exception:  # noqa: BLE001
        return None
    return None if callable(value) else value


def read_index(current: Any, index: int) -> Any:
    """Read a non-negative index from a list or tuple, None otherwise."""
    if not isinstance(current, (list, tuple)) or index < 0:
        return None
    return current[index] if index < len(current) else None


def tokenize_path(path: str) -> list[str | int] | None:
    """Split a path into identifier and index tokens.

    Args:
        path: Path string, e.g. ``datasets.sales.data[0]``

    Returns:
        Token list, or None if the path is malformed or uses a forbidden key
    """
    normalized = path.strip()
    if not normalized:
        return None

    tokens: list[str | int] = []
    i = 0
    while i < len(normalized):
        ch = normalized[i]

        if ch == ".":
            i += 1
            continue

        if ch == "[":
            close = normalized.find("]", i + 1)
            if close == -1:
                return None
            inside = normalized[i + 1 : close].strip()
            if not INDEX_PATTERN.fullmatch(inside):
                return None
            tokens.append(int(inside))
            i = close + 1
            continue

        match = IDENTIFIER_PATTERN.match(normalized, i)
        if not match:
            return None
        ident = match.group(0)
        if is_forbidden_key(ident):
            return None
        tokens.append(ident)
        i = match.end()

    return tokens


def resolve_path(root: Any, path: str) -> Any:
    """Resolve a path against a root value.

    Args:
        root: Value to start from, usually ``{"datasets": ..., "props": ...}``
        path: Path string

    Returns:
        Resolved value, or None if not found
    """
    tokens = tokenize_path(path)
    if tokens is None:
        return None

    current = root
    for token in tokens:
        if current is None:
            return None
        if isinstance(token, int):
            current = read_index(current, token)
        else:
            current = read_member(current, token)
    return current
