"""Shared enumerations for chartdeck."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class EvaluationMode(str, Enum):
    """How placeholder code is evaluated."""

    ALLOWLIST = "allowlist"  # path | fnName(arg, ...)
    EXPRESSION = "expression"  # bounded interpreter
    UNSAFE = "unsafe"  # host eval, opt-in only


class AggregateOp(str, Enum):
    """Column aggregation operation."""

    SUM = "sum"
    AVG = "avg"
    MIN = "min"
    MAX = "max"
