"""Engine configuration."""

from .loader import ConfigLoader, load_config, resolve_env_vars
from .models import (
    CacheConfig,
    EngineConfig,
    ExecutionConfig,
    HttpConfig,
    LoggingComponentsConfig,
    LoggingConfig,
    LoggingOptionsConfig,
    TelemetryConfig,
    TelemetryOTLPConfig,
)

__all__ = [
    # Loader
    "ConfigLoader",
    "load_config",
    "resolve_env_vars",
    # Models
    "EngineConfig",
    "HttpConfig",
    "CacheConfig",
    "ExecutionConfig",
    "LoggingConfig",
    "LoggingComponentsConfig",
    "LoggingOptionsConfig",
    "TelemetryConfig",
    "TelemetryOTLPConfig",
]
