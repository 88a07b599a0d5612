"""Plugin execution engine."""

from .engine import PluginEngine
from .outputs import OutputPublisher, label_pattern
from .step import LATENCY_KEY, StepExecutor
from .types import InstanceResult, TargetResult

__all__ = [
    "PluginEngine",
    "StepExecutor",
    "OutputPublisher",
    "label_pattern",
    "InstanceResult",
    "TargetResult",
    "LATENCY_KEY",
]
