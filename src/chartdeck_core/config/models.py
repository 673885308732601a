"""Chartdeck configuration data models."""

from dataclasses import asdict, dataclass, field

from chartdeck_core.logging import LogConfig
from chartdeck_core.types import EvaluationMode, LogFormat, LogLevel


@dataclass
class TemplateConfig:
    """Template evaluation configuration."""

    mode: EvaluationMode = EvaluationMode.EXPRESSION
    allow_unsafe: bool = False  # Only for trusted report content


@dataclass
class LoggingComponentsConfig:
    """Logging components configuration."""

    template: bool = True
    expression: bool = True
    unsafe: bool = True
    config: bool = True


@dataclass
class LoggingOptionsConfig:
    """Logging options configuration."""

    show_context: bool = True
    truncate_at: int = 200


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: LogLevel = LogLevel.WARN
    format: LogFormat = LogFormat.COLORED
    components: LoggingComponentsConfig = field(default_factory=LoggingComponentsConfig)
    options: LoggingOptionsConfig = field(default_factory=LoggingOptionsConfig)

    def to_log_config(self) -> LogConfig:
        """Convert to the logger's runtime configuration."""
        return LogConfig(
            level=self.level,
            format=self.format,
            show_context=self.options.show_context,
            truncate_at=self.options.truncate_at,
            components=asdict(self.components),
        )


@dataclass
class ChartdeckConfig:
    """Root configuration object."""

    template: TemplateConfig = field(default_factory=TemplateConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
