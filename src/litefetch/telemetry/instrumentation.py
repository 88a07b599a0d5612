"""Telemetry instrumentation helpers.

Both context managers accept ``Telemetry | None`` and do nothing but time
the block when telemetry is absent or disabled.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from opentelemetry.trace import Status, StatusCode

from .metrics import MetricLabels
from .setup import Telemetry


def _error_code(error: BaseException) -> str:
    return getattr(error, "code", None) or type(error).__name__


@asynccontextmanager
async def instrument_instance(
    telemetry: Telemetry | None,
    template_id: str,
    instance_id: str,
) -> AsyncIterator[dict[str, Any]]:
    """Context manager for instrumenting one instance execution.

    The caller may set ``result["status"]`` to report an overall failure
    that did not raise (all targets failed).

    Args:
        telemetry: Engine telemetry handles, or None
        template_id: Template identifier
        instance_id: Instance identifier

    Yields:
        Dictionary to store execution status
    """
    start_time = time.perf_counter()
    result: dict[str, Any] = {"status": MetricLabels.STATUS_SUCCESS}

    tracer = telemetry.tracer if telemetry else None
    fetch_metrics = telemetry.metrics if telemetry else None

    span = None
    if tracer:
        span = tracer.start_span(f"instance:{instance_id}")
        span.set_attribute("template.id", template_id)
        span.set_attribute("instance.id", instance_id)

    try:
        yield result
    except asyncio.CancelledError:
        result["status"] = MetricLabels.STATUS_CANCELLED
        raise
    except Exception as e:
        result["status"] = MetricLabels.STATUS_ERROR
        if span:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
        raise
    finally:
        duration = time.perf_counter() - start_time
        if fetch_metrics:
            fetch_metrics.record_instance_execution(template_id, duration, result["status"])
        if span:
            if result["status"] == MetricLabels.STATUS_SUCCESS:
                span.set_status(Status(StatusCode.OK))
            span.set_attribute("instance.status", result["status"])
            span.end()


@asynccontextmanager
async def instrument_step(
    telemetry: Telemetry | None,
    template_id: str,
    step_id: str,
) -> AsyncIterator[dict[str, Any]]:
    """Context manager for instrumenting step execution.

    Args:
        telemetry: Engine telemetry handles, or None
        template_id: Template identifier
        step_id: Step identifier

    Yields:
        Dictionary to store execution status
    """
    start_time = time.perf_counter()
    result: dict[str, Any] = {"status": MetricLabels.STATUS_SUCCESS, "error_code": None}

    tracer = telemetry.tracer if telemetry else None
    fetch_metrics = telemetry.metrics if telemetry else None

    span = None
    if tracer:
        span = tracer.start_span(f"step:{step_id}")
        span.set_attribute("template.id", template_id)
        span.set_attribute("step.id", step_id)

    try:
        yield result
    except asyncio.CancelledError:
        result["status"] = MetricLabels.STATUS_CANCELLED
        raise
    except Exception as e:
        result["status"] = MetricLabels.STATUS_ERROR
        result["error_code"] = _error_code(e)
        if span:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
        raise
    finally:
        duration = time.perf_counter() - start_time
        if fetch_metrics:
            fetch_metrics.record_step_execution(
                template_id=template_id,
                step_id=step_id,
                duration_seconds=duration,
                status=result["status"],
                error_code=result.get("error_code"),
            )
        if span:
            if result["status"] == MetricLabels.STATUS_SUCCESS:
                span.set_status(Status(StatusCode.OK))
            span.end()
