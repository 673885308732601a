"""Chartdeck configuration loader.

Reads ``chartdeck.yaml``, interpolates environment variables, validates the
result and converts it to the dataclass models in ``models.py``.
"""

import os
import re
from collections.abc import Callable
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from chartdeck_core.errors import create_error
from chartdeck_core.logging import ChartdeckLogger
from chartdeck_core.types import (
    EvaluationMode,
    LogFormat,
    LogLevel,
    ValidationIssue,
    ValidationResult,
)

from .models import ChartdeckConfig

CONFIG_PATH_ENV = "CHARTDECK_CONFIG_PATH"
LOCAL_CONFIG_NAME = "chartdeck.yaml"
HOME_CONFIG_PATH = Path(".chartdeck") / "config.yaml"

# ${VAR}, ${VAR:-default}, ${VAR:?message}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([?-])([^}]*))?\}")

SECTIONS = ("template", "logging")

# (section, key) -> accepted values
CHOICES: dict[tuple[str, str], list[str]] = {
    ("template", "mode"): [m.value for m in EvaluationMode],
    ("logging", "level"): [level.value for level in LogLevel],
    ("logging", "format"): [f.value for f in LogFormat],
}


def resolve_env_vars(value: str) -> str:
    """Substitute ``${VAR}`` references from the environment.

    ``${VAR:-default}`` falls back to ``default``; ``${VAR}`` and
    ``${VAR:?message}`` are required.

    Raises:
        ChartdeckError(CONFIG_INVALID): If a required variable is unset
    """

    def substitute(match: re.Match[str]) -> str:
        name, kind, extra = match.groups()
        if name in os.environ:
            return os.environ[name]
        if kind == "-":
            return extra or ""
        message = extra if kind == "?" and extra else None
        raise create_error(
            "CONFIG_INVALID",
            detail=message or f"Required environment variable {name} not set",
        )

    return ENV_VAR_PATTERN.sub(substitute, value)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` merged in, recursing into nested dicts."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _interpolate(data: Any) -> Any:
    if isinstance(data, str):
        return resolve_env_vars(data)
    if isinstance(data, dict):
        return {key: _interpolate(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_interpolate(item) for item in data]
    return data


def _from_data(model: Any, value: Any) -> Any:
    """Build a dataclass or enum declared by a config model from raw YAML data."""
    if is_dataclass(model) and isinstance(value, dict):
        known = {f.name: f.type for f in fields(model)}
        kwargs = {
            key: _from_data(known[key], item)
            for key, item in value.items()
            if key in known and item is not None
        }
        return model(**kwargs)
    if isinstance(model, type) and issubclass(model, Enum) and isinstance(value, str):
        return model(value)
    return value


class ConfigLoader:
    """Load and validate chartdeck configuration."""

    def __init__(self, logger: ChartdeckLogger | None = None):
        """Initialize config loader.

        Args:
            logger: Optional logger for load diagnostics
        """
        self._logger = logger
        self._config: ChartdeckConfig | None = None
        self._config_path: Path | None = None
        self._change_callbacks: list[Callable[[ChartdeckConfig], None]] = []

    def load(
        self,
        path: str | Path | None = None,
        use_defaults: bool = True,
        overrides: dict[str, Any] | None = None,
    ) -> ChartdeckConfig:
        """Load configuration from a YAML file.

        Without a path the first existing file wins:
        1. $CHARTDECK_CONFIG_PATH
        2. ./chartdeck.yaml
        3. ~/.chartdeck/config.yaml

        Args:
            path: Explicit config file
            use_defaults: Fall back to defaults when the file does not exist
            overrides: Values deep-merged over the file contents

        Returns:
            Loaded ChartdeckConfig

        Raises:
            ChartdeckError(CONFIG_INVALID): Missing file (without defaults),
                unreadable YAML or failed validation
        """
        config_path = Path(path) if path is not None else self._resolve_config_path()

        if not config_path.exists():
            if not use_defaults:
                raise create_error(
                    "CONFIG_INVALID",
                    detail=f"Configuration file not found: {config_path}",
                )
            self._log(LogLevel.INFO, f"{config_path} not found, using defaults")
            return self.load_from_dict(overrides or {})

        try:
            data = yaml.safe_load(config_path.read_text()) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID", detail=f"Invalid YAML in {config_path}: {e}"
            ) from e

        if not isinstance(data, dict):
            raise create_error(
                "CONFIG_INVALID",
                detail=f"{config_path} must contain a mapping at the top level",
            )

        data = _interpolate(data)
        if overrides:
            data = deep_merge(data, overrides)
        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> ChartdeckConfig:
        """Default configuration, no file involved."""
        return self.load_from_dict({})

    def load_from_dict(
        self, data: dict[str, Any], config_path: Path | None = None
    ) -> ChartdeckConfig:
        """Validate a configuration mapping and convert it to models.

        Raises:
            ChartdeckError(CONFIG_INVALID): If validation fails
        """
        result = self.validate(data)
        for warning in result.warnings:
            self._log(LogLevel.WARN, warning.message)
        if not result.valid:
            problems = "\n".join(f"- {issue.path}: {issue.message}" for issue in result.errors)
            raise create_error("CONFIG_INVALID", detail=f"Invalid configuration:\n{problems}")

        try:
            config = _from_data(ChartdeckConfig, data)
        except (TypeError, ValueError) as e:
            raise create_error("CONFIG_INVALID", detail=f"Cannot build configuration: {e}") from e

        self._config = config
        self._config_path = config_path
        self._log(LogLevel.INFO, f"Configuration loaded (mode={config.template.mode.value})")
        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Check a configuration mapping without building models.

        Unknown top-level keys are warnings; wrong types and values are errors.
        """
        errors: list[ValidationIssue] = []
        warnings = [
            ValidationIssue(
                path=str(key),
                message=f"Unknown configuration key: {key}",
                severity="warning",
            )
            for key in data
            if key not in SECTIONS
        ]

        def error(path: str, message: str) -> None:
            errors.append(ValidationIssue(path=path, message=message))

        sections: dict[str, dict[str, Any]] = {}
        for name in SECTIONS:
            section = data.get(name)
            if section is None:
                section = {}
            if isinstance(section, dict):
                sections[name] = section
            else:
                error(name, f"{name} must be a mapping")

        for (name, key), allowed in CHOICES.items():
            value = sections.get(name, {}).get(key)
            if value is not None and value not in allowed:
                error(f"{name}.{key}", f"{key} must be one of {allowed}")

        template = sections.get("template", {})
        allow_unsafe = template.get("allow_unsafe")
        if allow_unsafe is not None and not isinstance(allow_unsafe, bool):
            error("template.allow_unsafe", "allow_unsafe must be true or false")
        if template.get("mode") == EvaluationMode.UNSAFE.value and allow_unsafe is not True:
            error("template.mode", "mode 'unsafe' requires allow_unsafe: true")

        options = sections.get("logging", {}).get("options")
        if isinstance(options, dict) and "truncate_at" in options:
            truncate_at = options["truncate_at"]
            if isinstance(truncate_at, bool) or not isinstance(truncate_at, int) or truncate_at < 1:
                error("logging.options.truncate_at", "truncate_at must be a positive integer")

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def get(self) -> ChartdeckConfig:
        """Most recently loaded configuration.

        Raises:
            ChartdeckError(CONFIG_INVALID): If nothing has been loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def reload(self) -> ChartdeckConfig:
        """Re-read the last loaded file and notify on_change listeners.

        Raises:
            ChartdeckError(CONFIG_INVALID): If the configuration did not come
                from a file, or the file is now invalid
        """
        if self._config_path is None:
            raise create_error("CONFIG_INVALID", detail="Configuration was not loaded from a file")

        config = self.load(self._config_path)
        for listener in self._change_callbacks:
            try:
                listener(config)
            except Exception as e:  # noqa: BLE001
                self._log(LogLevel.ERROR, f"Config change listener failed: {e}")
        return config

    def on_change(self, callback: Callable[[ChartdeckConfig], None]) -> None:
        """Register a listener called with the new config after reload()."""
        self._change_callbacks.append(callback)

    def _log(self, level: LogLevel, message: str) -> None:
        if self._logger is not None:
            self._logger._log(level, "config", message)

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path)
        for candidate in (Path(LOCAL_CONFIG_NAME), Path.home() / HOME_CONFIG_PATH):
            if candidate.exists():
                return candidate
        return Path(LOCAL_CONFIG_NAME)


_default_loader: ConfigLoader | None = None


def get_config_loader() -> ConfigLoader:
    """Process-wide ConfigLoader."""
    global _default_loader  # noqa: PLW0603
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader


def load_config(path: str | Path | None = None) -> ChartdeckConfig:
    """Load configuration with the process-wide loader."""
    return get_config_loader().load(path)
