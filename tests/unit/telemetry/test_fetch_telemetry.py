"""Unit tests for engine telemetry."""

import asyncio

import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from litefetch.config import TelemetryConfig
from litefetch.errors import create_error
from litefetch.plugins import PluginInstance, parse_template_yaml
from litefetch.telemetry import (
    FetchMetrics,
    MetricLabels,
    instrument_instance,
    instrument_step,
    setup_telemetry,
)


def collect(reader: InMemoryMetricReader) -> dict[str, list]:
    """Metric name -> data points."""
    points: dict[str, list] = {}
    data = reader.get_metrics_data()
    if data is None:
        return points
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                points[metric.name] = list(metric.data.data_points)
    return points


@pytest.fixture
def reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def telemetry(reader):
    """Telemetry recording into an in-memory reader."""
    handles = setup_telemetry(TelemetryConfig(prometheus_enabled=False), metric_readers=[reader])
    yield handles
    handles.shutdown()


class TestSetupTelemetry:
    """Tests for setup_telemetry()."""

    def test_disabled(self):
        handles = setup_telemetry(TelemetryConfig(enabled=False))
        assert handles.metrics is None
        assert handles.meter is None
        assert handles.tracer is None

    def test_enabled(self, telemetry, reader):
        assert isinstance(telemetry.metrics, FetchMetrics)
        assert telemetry.readers == [reader]
        assert telemetry.tracer is None

    def test_tracing(self, reader):
        handles = setup_telemetry(
            TelemetryConfig(prometheus_enabled=False, tracing_enabled=True),
            metric_readers=[reader],
        )
        assert handles.tracer is not None
        handles.shutdown()

    def test_independent_instances(self, reader):
        """Test two setups do not share providers."""
        config = TelemetryConfig(prometheus_enabled=False)
        first = setup_telemetry(config, [reader])
        second = setup_telemetry(config, [InMemoryMetricReader()])
        assert first.meter_provider is not second.meter_provider
        first.shutdown()
        second.shutdown()


class TestInstrumentation:
    """Tests for instrument_instance() and instrument_step()."""

    @pytest.mark.asyncio
    async def test_without_telemetry(self):
        async with instrument_step(None, "t", "s") as result:
            pass
        assert result["status"] == MetricLabels.STATUS_SUCCESS

    @pytest.mark.asyncio
    async def test_step_error_recorded(self, telemetry, reader):
        with pytest.raises(Exception):
            async with instrument_step(telemetry, "crypto", "ticker") as result:
                raise create_error("HTTP_STATUS", url="u", status_code=500)

        assert result["status"] == MetricLabels.STATUS_ERROR
        assert result["error_code"] == "HTTP_STATUS"
        point = collect(reader)["litefetch_step_executions_total"][0]
        assert point.attributes[MetricLabels.ERROR_CODE] == "HTTP_STATUS"

    @pytest.mark.asyncio
    async def test_instance_cancel_recorded(self, telemetry, reader):
        with pytest.raises(asyncio.CancelledError):
            async with instrument_instance(telemetry, "crypto", "btc") as result:
                raise asyncio.CancelledError

        assert result["status"] == MetricLabels.STATUS_CANCELLED
        point = collect(reader)["litefetch_instance_executions_total"][0]
        assert point.attributes[MetricLabels.STATUS] == MetricLabels.STATUS_CANCELLED

    @pytest.mark.asyncio
    async def test_caller_reported_status(self, telemetry, reader):
        async with instrument_instance(telemetry, "crypto", "btc") as result:
            result["status"] = MetricLabels.STATUS_ERROR
        point = collect(reader)["litefetch_instance_executions_total"][0]
        assert point.attributes[MetricLabels.STATUS] == MetricLabels.STATUS_ERROR


class TestEngineMetrics:
    """Tests for metrics recorded by a running engine."""

    @pytest.mark.asyncio
    async def test_engine_records_metrics(self, make_engine, upstream, telemetry, reader):
        template = parse_template_yaml(
            """
id: crypto
execution:
  steps:
    - {id: ticker, url: "https://x/btc", cache_minutes: 1, extract: {price: price}}
outputs:
  - {key: price, format: "{{price}}"}
"""
        )
        engine = make_engine(telemetry=telemetry)
        upstream.json("https://x/btc", {"price": 1})
        instance = PluginInstance(id="btc", template_id="crypto")

        await engine.execute_instance(instance, template)
        await engine.execute_instance(instance, template)
        engine.reset_network_clients()

        points = collect(reader)
        assert sum(p.value for p in points["litefetch_instance_executions_total"]) == 2
        assert sum(p.value for p in points["litefetch_http_requests_total"]) == 1
        lookups = {
            p.attributes[MetricLabels.RESULT]: p.value
            for p in points["litefetch_cache_lookups_total"]
        }
        assert lookups == {MetricLabels.CACHE_MISS: 1, MetricLabels.CACHE_HIT: 1}
        assert sum(p.value for p in points["litefetch_pool_resets_total"]) == 1
        await engine.aclose()
