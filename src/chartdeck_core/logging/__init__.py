"""Chartdeck logging - colored or JSON component logging for template rendering."""

from .colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    ChartdeckLogger,
    LogConfig,
    RenderLogger,
    get_logger,
    reset_logger,
)

__all__ = [
    # Logger classes
    "ChartdeckLogger",
    "RenderLogger",
    "LogConfig",
    "get_logger",
    "reset_logger",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
