"""Engine configuration loader."""

import os
import re
import typing
from collections.abc import Callable
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from litefetch.errors import create_error
from litefetch.types import LogLevel, ValidationIssue, ValidationResult

from .models import EngineConfig

ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::([?-])([^}]*))?\}")

CONFIG_PATH_ENV = "LITEFETCH_CONFIG_PATH"
LOCAL_CONFIG = "litefetch.yaml"


def resolve_env_vars(value: str) -> str:
    """Expand ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?message}``.

    A bare ``${VAR}`` is required, like the ``:?`` form without a message.

    Raises:
        FetchError: CONFIG_INVALID when a required variable is unset
    """

    def expand(match: re.Match[str]) -> str:
        name, operator, operand = match.groups()
        current = os.environ.get(name)
        if current is not None:
            return current
        if operator == "-":
            return operand or ""
        missing = f"Required environment variable {name} not set"
        raise create_error("CONFIG_INVALID", detail=(operand if operator == "?" else "") or missing)

    return ENV_PATTERN.sub(expand, value)


def _expand_tree(data: Any) -> Any:
    if isinstance(data, dict):
        return {key: _expand_tree(item) for key, item in data.items()}
    if isinstance(data, list):
        return [_expand_tree(item) for item in data]
    return resolve_env_vars(data) if isinstance(data, str) else data


def _coerce_enum(enum_type: type[Enum], value: Any) -> Any:
    if not isinstance(value, str):
        return value
    # "info", "INFO" and "Json" are all accepted
    for candidate in (value, value.upper(), value.lower()):
        try:
            return enum_type(candidate)
        except ValueError:
            continue
    raise ValueError(f"{value!r} is not a valid {enum_type.__name__}")


def _issue(path: str, message: str) -> ValidationIssue:
    return ValidationIssue(path=path, message=message, severity="error")


class ConfigLoader:
    """Load and validate engine configuration."""

    SECTIONS = frozenset(f.name for f in fields(EngineConfig))

    def __init__(self, logger: Any = None):
        """Initialize config loader.

        Args:
            logger: Optional EngineLogger instance
        """
        self._config: EngineConfig | None = None
        self._config_path: Path | None = None
        self._logger = logger
        self._change_callbacks: list[Callable[[EngineConfig], None]] = []

    def load(self, path: str | Path | None = None, use_defaults: bool = True) -> EngineConfig:
        """Load configuration from file.

        Resolution order if path not specified:
        1. LITEFETCH_CONFIG_PATH environment variable
        2. ./litefetch.yaml
        3. ~/.litefetch/config.yaml
        4. If use_defaults=True and no file found, use default configuration

        Args:
            path: Optional path to config file
            use_defaults: If True, use default config when no file found

        Returns:
            Loaded EngineConfig instance

        Raises:
            FetchError: If file not found (when use_defaults=False) or invalid
        """
        if path is None:
            path = self._resolve_config_path()

        config_path = Path(path)

        if not config_path.exists():
            if use_defaults:
                return self.load_defaults()
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Configuration file not found: {config_path}",
            )

        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Invalid YAML in config file: {e}",
            ) from e

        if not isinstance(data, dict):
            raise create_error("CONFIG_INVALID", detail="Configuration root must be a mapping")

        data = _expand_tree(data)
        return self.load_from_dict(data, config_path)

    def load_defaults(self) -> EngineConfig:
        """Load default configuration without a file."""
        return self.load_from_dict({})

    def load_from_dict(
        self, data: dict[str, Any], config_path: Path | None = None
    ) -> EngineConfig:
        """Load configuration from dictionary.

        Args:
            data: Configuration dictionary
            config_path: Optional path to config file (for tracking)

        Returns:
            Loaded EngineConfig instance

        Raises:
            FetchError: If configuration is invalid
        """
        validation = self.validate(data)
        if not validation.valid:
            error_messages = [f"- {issue.path}: {issue.message}" for issue in validation.errors]
            raise create_error(
                "CONFIG_INVALID",
                detail="Configuration validation failed:\n" + "\n".join(error_messages),
            )

        try:
            config = self._convert_field(EngineConfig, data)
        except (TypeError, ValueError) as e:
            raise create_error(
                "CONFIG_INVALID",
                detail=f"Failed to parse configuration: {e}",
            ) from e

        self._config = config
        self._config_path = config_path

        if self._logger:
            self._logger._log(
                LogLevel.INFO if config_path else LogLevel.DEBUG,
                "engine",
                "Configuration loaded" + (f" from {config_path}" if config_path else ""),
            )

        return config

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """Validate config data without loading.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationResult with errors and warnings
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        for key, section in data.items():
            if key not in self.SECTIONS:
                warnings.append(
                    ValidationIssue(
                        path=key,
                        message=f"Unknown configuration key: {key}",
                        severity="warning",
                    )
                )
            elif not isinstance(section, dict):
                errors.append(_issue(key, f"{key} must be a dictionary"))

        http = data.get("http")
        if isinstance(http, dict) and "timeout_seconds" in http:
            timeout = http["timeout_seconds"]
            if isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0:
                errors.append(_issue("http.timeout_seconds", "timeout_seconds must be positive"))

        cache = data.get("cache")
        if isinstance(cache, dict):
            for key in ("max_entries", "max_body_bytes"):
                if key in cache:
                    value = cache[key]
                    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                        errors.append(
                            _issue(f"cache.{key}", f"{key} must be a positive integer")
                        )
            if "evict_fraction" in cache:
                fraction = cache["evict_fraction"]
                if not isinstance(fraction, int | float) or not 0 < fraction <= 1:
                    errors.append(
                        _issue("cache.evict_fraction", "evict_fraction must be in (0, 1]")
                    )

        execution = data.get("execution")
        if isinstance(execution, dict) and "target_stagger_ms" in execution:
            stagger = execution["target_stagger_ms"]
            if isinstance(stagger, bool) or not isinstance(stagger, int) or stagger < 0:
                errors.append(
                    _issue(
                        "execution.target_stagger_ms",
                        "target_stagger_ms must be a non-negative integer",
                    )
                )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def get(self) -> EngineConfig:
        """Get current configuration.

        Raises:
            FetchError: If configuration not loaded
        """
        if self._config is None:
            raise create_error("CONFIG_INVALID", detail="Configuration not loaded")
        return self._config

    def reload(self) -> EngineConfig:
        """Reload configuration from file and notify registered callbacks.

        Returns:
            Reloaded EngineConfig instance

        Raises:
            FetchError: If no config path set or reload fails
        """
        if self._config_path is None:
            raise create_error("CONFIG_INVALID", detail="No config path set, cannot reload")

        new_config = self.load(self._config_path, use_defaults=False)

        for callback in self._change_callbacks:
            try:
                callback(new_config)
            except Exception as e:  # noqa: BLE001 - one bad listener must not block the rest
                if self._logger:
                    self._logger._log(
                        LogLevel.ERROR, "engine", f"Config change callback failed: {e}"
                    )

        return new_config

    def on_change(self, callback: Callable[[EngineConfig], None]) -> None:
        """Register callback for config changes."""
        self._change_callbacks.append(callback)

    def _resolve_config_path(self) -> Path:
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path)

        local_path = Path(LOCAL_CONFIG)
        if local_path.exists():
            return local_path

        home_path = Path.home() / ".litefetch" / "config.yaml"
        if home_path.exists():
            return home_path

        return local_path

    def _convert_field(self, field_type: Any, value: Any) -> Any:
        """Coerce a YAML value into the declared field type.

        Sections become their dataclasses (missing keys keep defaults),
        enum names match case-insensitively, and YAML ints fill float
        fields. Anything else passes through for validation to judge.
        """
        if value is None:
            return None

        if is_dataclass(field_type) and isinstance(value, dict):
            return field_type(
                **{
                    f.name: self._convert_field(f.type, value[f.name])
                    for f in fields(field_type)
                    if f.name in value
                }
            )

        if typing.get_origin(field_type) is dict and isinstance(value, dict):
            _, item_type = typing.get_args(field_type) or (Any, Any)
            return {str(k): self._convert_field(item_type, v) for k, v in value.items()}

        if isinstance(field_type, type) and issubclass(field_type, Enum):
            return _coerce_enum(field_type, value)

        if field_type is float and type(value) is int:
            return float(value)

        return value


def load_config(path: str | Path | None = None, logger: Any = None) -> EngineConfig:
    """Convenience function to load config with a fresh loader.

    Args:
        path: Optional path to config file
        logger: Optional EngineLogger instance

    Returns:
        Loaded EngineConfig instance
    """
    return ConfigLoader(logger).load(path)
