"""Engine logging - hierarchical colored logging for plugin execution."""

from .colors import (
    CYAN,
    GREEN,
    GREY,
    LIGHT_BLUE,
    MAGENTA,
    ORANGE,
    RED,
    RESET,
    YELLOW,
)
from .logger import (
    COMPONENTS,
    EngineLogger,
    InstanceLogger,
    LogConfig,
    StepLogger,
)

__all__ = [
    # Logger classes
    "EngineLogger",
    "InstanceLogger",
    "StepLogger",
    "LogConfig",
    "COMPONENTS",
    # Colors
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
    "GREY",
]
