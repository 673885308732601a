"""Chartdeck logger: one line per event, colored for terminals or JSON for collectors."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from chartdeck_core.logging.colors import (
    CYAN,
    GREEN,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from chartdeck_core.types import LogFormat, LogLevel

COMPONENTS = ("template", "expression", "unsafe", "config")

LEVEL_RANK = {LogLevel.DEBUG: 0, LogLevel.INFO: 1, LogLevel.WARN: 2, LogLevel.ERROR: 3}

LEVEL_COLORS = {
    LogLevel.DEBUG: LIGHT_BLUE,
    LogLevel.INFO: CYAN,
    LogLevel.WARN: YELLOW,
    LogLevel.ERROR: RED,
}

COMPONENT_COLORS = {
    "template": CYAN,
    "expression": GREEN,
    "unsafe": ORANGE,
    "config": MAGENTA,
}


@dataclass
class LogConfig:
    """What gets logged and where it goes.

    ``components`` switches individual components off; a component missing
    from the mapping is logged.
    """

    level: LogLevel = LogLevel.WARN
    format: LogFormat = LogFormat.COLORED
    show_context: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default_factory=lambda: sys.stderr)

    def __post_init__(self) -> None:
        self.components = {name: True for name in COMPONENTS} | self.components


class ChartdeckLogger:
    """Writes component log lines and hands out per-render loggers."""

    def __init__(self, config: LogConfig | None = None):
        self.config = config or LogConfig()

    def render(self, template_id: str | None = None) -> "RenderLogger":
        """Logger for one render call, tagged with the report field being rendered."""
        return RenderLogger(self, template_id)

    def configure(self, config: LogConfig) -> None:
        self.config = config

    def enabled(self, level: LogLevel, component: str) -> bool:
        if LEVEL_RANK[level] < LEVEL_RANK[self.config.level]:
            return False
        return self.config.components.get(component, True)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        if not self.enabled(level, component):
            return
        if self.config.format == LogFormat.JSON:
            line = self._json_line(level, component, message, context)
        else:
            line = self._colored_line(level, component, message, context)
        try:
            print(line, file=self.config.output)
        except (OSError, ValueError):
            # Closed or broken output stream: the line is dropped
            return

    def _json_line(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None,
    ) -> str:
        timestamp = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        entry = {
            "timestamp": timestamp,
            "level": level.value,
            "component": component,
            "message": message,
            **(context or {}),
        }
        return json.dumps(entry, default=str)

    def _colored_line(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None,
    ) -> str:
        tag = f"{COMPONENT_COLORS.get(component, RESET)}[{component.upper()}]{RESET}"
        line = f"{tag} {LEVEL_COLORS.get(level, RESET)}{message}{RESET}"
        if not (context and self.config.show_context):
            return line

        limit = self.config.truncate_at
        shown = str(context)
        if len(shown) > limit:
            shown = shown[:limit] + "..."
        return f"{line} {LIGHT_BLUE}{shown}{RESET}"


class RenderLogger:
    """Events of a single render call."""

    def __init__(self, parent: ChartdeckLogger, template_id: str | None = None):
        self.parent = parent
        self.template_id = template_id

    def _emit(
        self,
        level: LogLevel,
        component: str,
        event: str,
        message: str,
        **extra: Any,
    ) -> None:
        context: dict[str, Any] = {"event": event}
        if self.template_id:
            context["template_id"] = self.template_id
        context.update((key, value) for key, value in extra.items() if value is not None)
        self.parent._log(level, component, message, context)

    def _failure(
        self, component: str, event: str, message: str, expression: str, error: Exception
    ) -> None:
        self._emit(
            LogLevel.WARN,
            component,
            event,
            f"{message} '{expression}': {error}",
            expression=expression,
            error=str(error),
            error_code=getattr(error, "code", None),
            error_type=type(error).__name__,
        )

    def placeholder_failed(self, expression: str, error: Exception) -> None:
        """A ``{{ }}`` placeholder failed and was replaced with an empty string."""
        self._failure(
            "template",
            "placeholder_failed",
            "Failed to evaluate template expression",
            expression,
            error,
        )

    def expression_failed(self, expression: str, error: Exception) -> None:
        """A whole-value expression failed and rendered empty."""
        self._failure(
            "expression", "expression_failed", "Failed to evaluate expression", expression, error
        )

    def unsafe_rejected(self, expression: str) -> None:
        self._emit(
            LogLevel.WARN,
            "unsafe",
            "unsafe_rejected",
            "Unsafe expression ignored (allow_unsafe is disabled)",
            expression=expression,
        )

    def unsafe_evaluating(self, expression: str) -> None:
        self._emit(
            LogLevel.DEBUG,
            "unsafe",
            "unsafe_evaluating",
            "Evaluating unsafe expression",
            expression=expression,
        )

    def completed(self, placeholders: int, failures: int) -> None:
        self._emit(
            LogLevel.DEBUG,
            "template",
            "render_completed",
            f"Rendered {placeholders} placeholders ({failures} failed)",
            placeholders=placeholders,
            failures=failures,
        )


_default_logger: ChartdeckLogger | None = None


def get_logger() -> ChartdeckLogger:
    """Process-wide logger."""
    global _default_logger  # noqa: PLW0603
    if _default_logger is None:
        _default_logger = ChartdeckLogger()
    return _default_logger


def reset_logger() -> None:
    """Drop the process-wide logger so the next get_logger() builds a fresh one."""
    global _default_logger  # noqa: PLW0603
    _default_logger = None
