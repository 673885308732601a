"""Chartdeck configuration - Config loading and management."""

from .loader import (
    ConfigLoader,
    deep_merge,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    ChartdeckConfig,
    LoggingComponentsConfig,
    LoggingConfig,
    LoggingOptionsConfig,
    TemplateConfig,
)

__all__ = [
    # Config models
    "ChartdeckConfig",
    "TemplateConfig",
    "LoggingConfig",
    "LoggingComponentsConfig",
    "LoggingOptionsConfig",
    # Loader
    "ConfigLoader",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
    "deep_merge",
]
