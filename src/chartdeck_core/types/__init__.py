"""Shared types for chartdeck.

Import from here rather than submodules:
    from chartdeck_core.types import EvaluationMode, LogLevel
"""

from .enums import AggregateOp, EvaluationMode, LogFormat, LogLevel
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "EvaluationMode",
    "AggregateOp",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
