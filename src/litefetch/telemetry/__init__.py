"""Fetch engine telemetry - OpenTelemetry metrics and traces."""

from .instrumentation import instrument_instance, instrument_step
from .metrics import METRIC_PREFIX, FetchMetrics, MetricLabels
from .setup import Telemetry, setup_telemetry

__all__ = [
    # Setup
    "setup_telemetry",
    "Telemetry",
    # Metrics
    "FetchMetrics",
    "MetricLabels",
    "METRIC_PREFIX",
    # Instrumentation
    "instrument_instance",
    "instrument_step",
]
