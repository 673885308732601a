"""Unsafe expression evaluation for trusted template content."""

from .evaluator import AttrDict, UnsafeExpressionEvaluator, wrap_data

__all__ = [
    "UnsafeExpressionEvaluator",
    "AttrDict",
    "wrap_data",
]
