"""Fetch engine metrics schema - OpenTelemetry conventions.

Metrics:
- Counters: instance executions, step executions, HTTP requests,
  cache lookups, coalesced waits, client pool resets
- Histograms: step, HTTP request and instance durations

Labels/Attributes:
- template_id: Plugin template identifier
- step_id: Step identifier within a template chain
- status: Execution status (success, error, cancelled)
- error_code: FetchError code when status=error
- result: Cache lookup outcome (hit, miss, expired)

All metrics use the 'litefetch_' prefix.
"""

from dataclasses import dataclass
from typing import Any

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Histogram

METRIC_PREFIX = "litefetch"


@dataclass
class MetricLabels:
    """Standard metric labels/attributes."""

    TEMPLATE_ID = "template_id"
    STEP_ID = "step_id"
    METHOD = "method"
    SOURCE = "source"

    STATUS = "status"
    ERROR_CODE = "error_code"
    RESULT = "result"

    # Status values
    STATUS_SUCCESS = "success"
    STATUS_ERROR = "error"
    STATUS_CANCELLED = "cancelled"
    STATUS_SKIPPED = "skipped"

    # Cache lookup values
    CACHE_HIT = "hit"
    CACHE_MISS = "miss"
    CACHE_EXPIRED = "expired"


class FetchMetrics:
    """Fetch engine metrics collection."""

    def __init__(self, meter: metrics.Meter):
        """Initialize metrics.

        Args:
            meter: OpenTelemetry Meter instance
        """
        self._meter = meter
        self._setup_counters()
        self._setup_histograms()

    def _setup_counters(self) -> None:
        self.instance_executions_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_instance_executions_total",
            description="Total number of plugin instance executions",
            unit="1",
        )
        self.step_executions_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_step_executions_total",
            description="Total number of chain step executions",
            unit="1",
        )
        self.http_requests_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_http_requests_total",
            description="Total number of upstream requests actually issued",
            unit="1",
        )
        self.cache_lookups_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_cache_lookups_total",
            description="Step cache lookups by outcome",
            unit="1",
        )
        self.coalesced_requests_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_coalesced_requests_total",
            description="Requests served by joining an identical in-flight request",
            unit="1",
        )
        self.pool_resets_total: Counter = self._meter.create_counter(
            name=f"{METRIC_PREFIX}_pool_resets_total",
            description="HTTP client pool resets after network failures",
            unit="1",
        )

    def _setup_histograms(self) -> None:
        self.instance_duration_seconds: Histogram = self._meter.create_histogram(
            name=f"{METRIC_PREFIX}_instance_duration_seconds",
            description="Plugin instance execution duration in seconds",
            unit="s",
        )
        self.step_duration_seconds: Histogram = self._meter.create_histogram(
            name=f"{METRIC_PREFIX}_step_duration_seconds",
            description="Step execution duration in seconds",
            unit="s",
        )
        self.http_request_duration_seconds: Histogram = self._meter.create_histogram(
            name=f"{METRIC_PREFIX}_http_request_duration_seconds",
            description="Upstream request duration in seconds",
            unit="s",
        )

    # Convenience methods for recording metrics

    def record_instance_execution(
        self,
        template_id: str,
        duration_seconds: float,
        status: str,
    ) -> None:
        """Record one instance execution.

        Args:
            template_id: Template identifier
            duration_seconds: Execution duration
            status: Execution status (success, error, cancelled)
        """
        labels = {MetricLabels.TEMPLATE_ID: template_id, MetricLabels.STATUS: status}
        self.instance_executions_total.add(1, labels)
        self.instance_duration_seconds.record(duration_seconds, labels)

    def record_step_execution(
        self,
        template_id: str,
        step_id: str,
        duration_seconds: float,
        status: str,
        error_code: str | None = None,
    ) -> None:
        """Record step execution.

        Args:
            template_id: Template identifier
            step_id: Step identifier
            duration_seconds: Execution duration
            status: Execution status
            error_code: Error code if status is error
        """
        labels: dict[str, Any] = {
            MetricLabels.TEMPLATE_ID: template_id,
            MetricLabels.STEP_ID: step_id,
            MetricLabels.STATUS: status,
        }
        if error_code:
            labels[MetricLabels.ERROR_CODE] = error_code

        self.step_executions_total.add(1, labels)
        self.step_duration_seconds.record(duration_seconds, labels)

    def record_http_request(
        self,
        method: str,
        source: str,
        duration_seconds: float,
        status: str,
    ) -> None:
        """Record an upstream request (HTTP or native).

        Args:
            method: HTTP method, or "NATIVE"
            source: "http" or "native"
            duration_seconds: Request duration
            status: success or error
        """
        labels = {
            MetricLabels.METHOD: method,
            MetricLabels.SOURCE: source,
            MetricLabels.STATUS: status,
        }
        self.http_requests_total.add(1, labels)
        self.http_request_duration_seconds.record(duration_seconds, labels)

    def record_cache_lookup(self, result: str) -> None:
        self.cache_lookups_total.add(1, {MetricLabels.RESULT: result})

    def record_coalesced(self) -> None:
        self.coalesced_requests_total.add(1)

    def record_pool_reset(self) -> None:
        self.pool_resets_total.add(1)
