"""Single chain step execution."""

import asyncio
import time
from collections.abc import MutableMapping

from litefetch.cache import RequestCoalescer, StepCache, fingerprint
from litefetch.errors import FetchError, get_error_factory
from litefetch.extraction import extract
from litefetch.http import ClientPool, fetch_raw
from litefetch.logging import StepLogger
from litefetch.native import NativeResolverRegistry, is_native
from litefetch.plugins import StepDefinition
from litefetch.telemetry import MetricLabels, Telemetry, instrument_step
from litefetch.template import resolve
from litefetch.transform import apply_transforms
from litefetch.types import HttpMethod

LATENCY_KEY = "__latency__"


class StepExecutor:
    """Runs one step: skip guard, cache, fetch, extract, transform, cache write."""

    def __init__(
        self,
        cache: StepCache,
        coalescer: RequestCoalescer,
        pool: ClientPool,
        natives: NativeResolverRegistry,
        telemetry: Telemetry | None = None,
    ):
        """Initialize step executor.

        Args:
            cache: Shared step response cache
            coalescer: Shared in-flight request map
            pool: HTTP client pool
            natives: Native resolver registry
            telemetry: Optional telemetry handles
        """
        self._cache = cache
        self._coalescer = coalescer
        self._pool = pool
        self._natives = natives
        self._telemetry = telemetry

    @property
    def _metrics(self):
        return self._telemetry.metrics if self._telemetry else None

    async def execute(
        self,
        instance_key: str,
        step: StepDefinition,
        context: MutableMapping[str, str],
        template_id: str = "",
        log: StepLogger | None = None,
    ) -> str | None:
        """Execute ``step`` against ``context`` (mutated in place).

        Args:
            instance_key: Instance id plus target suffix
            step: Step definition
            context: Target context
            template_id: Template identifier for metrics
            log: Optional step-scoped logger

        Returns:
            Raw response body, or None when the skip guard fired

        Raises:
            asyncio.CancelledError: The caller was cancelled
            FetchError: Any other failure, with step context attached
        """
        if step.skip_if_set and context.get(step.skip_if_set):
            if log:
                log.skipped(step.skip_if_set)
            if self._metrics:
                self._metrics.record_step_execution(
                    template_id, step.id, 0.0, MetricLabels.STATUS_SKIPPED
                )
            return None

        url = resolve(step.url, context)
        body = resolve(step.body, context)
        key = fingerprint(instance_key, step.id, url, body)

        async with instrument_step(self._telemetry, template_id, step.id):
            try:
                lookup = self._cache.lookup(key, step.cache_minutes)
                if step.cache_minutes > 0 and self._metrics:
                    self._metrics.record_cache_lookup(lookup.result)

                if lookup.entry is not None:
                    raw = lookup.entry.body
                    if log:
                        log.cache_hit(lookup.age_seconds)
                else:
                    raw = await self._fetch(step, url, body, key, context, log)

                extract(raw, step.extract, context, step.response_format)
                apply_transforms(step.process, context)
            except asyncio.CancelledError:
                raise
            except FetchError as e:
                error = e.with_context(step_id=step.id, instance_id=instance_key, url=url)
                if log:
                    log.failed(error)
                raise error from e
            except Exception as e:
                error = get_error_factory().from_exception(
                    e, step_id=step.id, instance_id=instance_key, url=url
                )
                if log:
                    log.failed(error)
                raise error from e

        # Only a body that survived extraction and transforms is cached
        if lookup.entry is None and step.cache_minutes > 0:
            if not self._cache.put(key, raw) and log:
                log.not_cached("body exceeds cache size limit")

        return raw

    async def _fetch(
        self,
        step: StepDefinition,
        url: str,
        body: str,
        key: str,
        context: MutableMapping[str, str],
        log: StepLogger | None,
    ) -> str:
        if is_native(url):
            start = time.perf_counter()
            status = MetricLabels.STATUS_ERROR
            try:
                raw = await self._natives.resolve(url)
                status = MetricLabels.STATUS_SUCCESS
            finally:
                self._record_request("NATIVE", "native", start, status)
            if log:
                log.fetched(url, int((time.perf_counter() - start) * 1000), native=True)
            return raw

        proxy = resolve(step.proxy, context) if step.proxy else ""
        headers = {name: resolve(value, context) for name, value in step.headers.items()}

        if self._coalescer.in_flight(key):
            if log:
                log.coalesced(url)
            if self._metrics:
                self._metrics.record_coalesced()

        start = time.perf_counter()
        raw = await self._coalescer.run(
            key,
            lambda: self._fetch_http(step, url, body, headers, proxy),
            url=url,
        )
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        context[LATENCY_KEY] = str(elapsed_ms)
        if log:
            log.fetched(url, elapsed_ms)
        return raw

    async def _fetch_http(
        self,
        step: StepDefinition,
        url: str,
        body: str,
        headers: dict[str, str],
        proxy: str,
    ) -> str:
        start = time.perf_counter()
        status = MetricLabels.STATUS_ERROR
        try:
            raw = await fetch_raw(
                self._pool,
                step.method,
                url,
                body=body,
                headers=headers,
                encoding=step.response_encoding,
                proxy=proxy,
            )
            status = MetricLabels.STATUS_SUCCESS
            return raw
        finally:
            self._record_request(HttpMethod.parse(step.method).value, "http", start, status)

    def _record_request(self, method: str, source: str, start: float, status: str) -> None:
        if self._metrics:
            self._metrics.record_http_request(
                method, source, time.perf_counter() - start, status
            )
