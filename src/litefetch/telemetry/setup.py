"""Telemetry setup - OpenTelemetry initialization.

Configures per-engine OpenTelemetry providers:
- MeterProvider with PrometheusMetricReader (or caller-supplied readers)
- TracerProvider with optional OTLP span exporter

Providers are owned by the returned Telemetry object and never installed
as the process-wide OpenTelemetry globals, so several engines (or tests)
can coexist in one process.
"""

from dataclasses import dataclass, field
from typing import Any

from opentelemetry import metrics, trace
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from litefetch.config import TelemetryConfig, TelemetryOTLPConfig

from .metrics import FetchMetrics


@dataclass
class Telemetry:
    """Handles to one engine's meter, tracer and metrics."""

    config: TelemetryConfig
    meter: metrics.Meter | None = None
    tracer: trace.Tracer | None = None
    metrics: FetchMetrics | None = None
    meter_provider: MeterProvider | None = None
    tracer_provider: TracerProvider | None = None
    readers: list[MetricReader] = field(default_factory=list)

    def shutdown(self) -> None:
        """Flush and shut down owned providers."""
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
        if self.meter_provider is not None:
            self.meter_provider.shutdown()


def _create_otlp_span_exporter(otlp_config: TelemetryOTLPConfig) -> Any:
    # Optional dependency: install the "otlp" extra
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    return OTLPSpanExporter(
        endpoint=otlp_config.endpoint,
        insecure=otlp_config.insecure,
        headers=otlp_config.headers or None,
    )


def setup_telemetry(
    config: TelemetryConfig | None = None,
    metric_readers: list[MetricReader] | None = None,
) -> Telemetry:
    """Set up OpenTelemetry instrumentation for one engine.

    Args:
        config: Telemetry configuration (uses defaults if None)
        metric_readers: Readers to attach instead of the Prometheus reader,
            e.g. an InMemoryMetricReader in tests

    Returns:
        Telemetry handles; all fields but config are None when disabled
    """
    config = config or TelemetryConfig()

    if not config.enabled:
        return Telemetry(config=config)

    resource = Resource.create(
        {
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: config.service_version,
        }
    )

    readers = list(metric_readers or [])
    if not readers and config.prometheus_enabled:
        from opentelemetry.exporter.prometheus import PrometheusMetricReader

        readers.append(PrometheusMetricReader())

    meter_provider = MeterProvider(metric_readers=readers, resource=resource)
    meter = meter_provider.get_meter(config.service_name, config.service_version)

    tracer_provider = None
    tracer = None
    if config.tracing_enabled:
        tracer_provider = TracerProvider(resource=resource)
        if config.otlp.enabled:
            tracer_provider.add_span_processor(
                BatchSpanProcessor(_create_otlp_span_exporter(config.otlp))
            )
        tracer = tracer_provider.get_tracer(config.service_name, config.service_version)

    return Telemetry(
        config=config,
        meter=meter,
        tracer=tracer,
        metrics=FetchMetrics(meter),
        meter_provider=meter_provider,
        tracer_provider=tracer_provider,
        readers=readers,
    )
