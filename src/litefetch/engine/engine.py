"""Plugin engine - runs plugin instances across their targets."""

import asyncio
import time
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import httpx

from litefetch.cache import RequestCoalescer, StepCache
from litefetch.config import EngineConfig, load_config
from litefetch.errors import get_error_factory
from litefetch.http import ClientPool
from litefetch.logging import EngineLogger, InstanceLogger
from litefetch.native import NativeResolverRegistry
from litefetch.plugins import PluginInstance, PluginTemplate, build_context
from litefetch.sink import OutputSink
from litefetch.telemetry import MetricLabels, Telemetry, instrument_instance, setup_telemetry
from litefetch.transform import apply_transforms
from litefetch.types import ExecutionType, TargetStatus

from .outputs import OutputPublisher
from .step import StepExecutor
from .types import InstanceResult, TargetResult


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class PluginEngine:
    """Executes plugin instances and publishes their outputs.

    One engine owns the step cache, the in-flight request map, the HTTP
    client pool and the native resolver registry. Instances sharing an
    engine share those; separate engines share nothing.
    """

    def __init__(
        self,
        sink: OutputSink,
        config: EngineConfig | None = None,
        *,
        natives: NativeResolverRegistry | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: EngineLogger | None = None,
        telemetry: Telemetry | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize plugin engine.

        Args:
            sink: Destination for published values
            config: Engine configuration (defaults to EngineConfig())
            natives: Native resolver registry (an empty one if None)
            transport: HTTP transport override, e.g. httpx.MockTransport
            logger: Engine logger (built from config.logging if None)
            telemetry: Telemetry handles; no metrics when None
            clock: Monotonic seconds source for cache ages
        """
        self._config = config or EngineConfig()
        self._logger = logger or EngineLogger(self._config.logging.to_log_config())
        self._telemetry = telemetry
        self._owns_telemetry = False

        self._cache = StepCache(self._config.cache, clock=clock, logger=self._logger)
        self._coalescer = RequestCoalescer()
        self._pool = ClientPool(self._config.http, transport=transport, logger=self._logger)
        self._natives = natives or NativeResolverRegistry()

        self._steps = StepExecutor(
            self._cache, self._coalescer, self._pool, self._natives, telemetry
        )
        self._publisher = OutputPublisher(sink)

    @classmethod
    def from_config(
        cls, sink: OutputSink, path: str | Path | None = None, **kwargs: Any
    ) -> "PluginEngine":
        """Create an engine from a YAML configuration file.

        Telemetry is set up from the file's ``telemetry`` section unless
        ``telemetry`` is passed, and is shut down by ``aclose()``.

        Args:
            sink: Destination for published values
            path: Config path (resolved like ``load_config`` when None)
            **kwargs: Forwarded to the constructor

        Returns:
            Configured PluginEngine
        """
        config = load_config(path, logger=kwargs.get("logger"))
        owns_telemetry = kwargs.get("telemetry") is None
        if owns_telemetry:
            kwargs["telemetry"] = setup_telemetry(config.telemetry)

        engine = cls(sink, config, **kwargs)
        engine._owns_telemetry = owns_telemetry
        return engine

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def logger(self) -> EngineLogger:
        return self._logger

    @property
    def cache(self) -> StepCache:
        return self._cache

    @property
    def coalescer(self) -> RequestCoalescer:
        return self._coalescer

    @property
    def pool(self) -> ClientPool:
        return self._pool

    @property
    def natives(self) -> NativeResolverRegistry:
        return self._natives

    async def execute_instance(
        self,
        instance: PluginInstance,
        template: PluginTemplate,
        cancel: asyncio.Event | None = None,
    ) -> bool:
        """Run one refresh of an instance.

        Args:
            instance: Configured instance
            template: Template the instance uses
            cancel: Event that aborts the run when set

        Returns:
            True if at least one target succeeded and the run was not cancelled
        """
        result = await self.run_instance(instance, template, cancel)
        return result.success

    async def run_instance(
        self,
        instance: PluginInstance,
        template: PluginTemplate,
        cancel: asyncio.Event | None = None,
    ) -> InstanceResult:
        """Run one refresh of an instance and report every target's outcome.

        Target failures are published as error outputs and never raised.
        Cancelling the calling task still raises ``asyncio.CancelledError``.

        Args:
            instance: Configured instance
            template: Template the instance uses
            cancel: Event that aborts the run when set

        Returns:
            InstanceResult with one TargetResult per target
        """
        result = InstanceResult(instance_id=instance.id)
        if not instance.enabled:
            return result
        if cancel is not None and cancel.is_set():
            result.cancelled = True
            return result

        log = self._logger.instance(instance.id)
        targets: list[Mapping[str, str]] = list(instance.targets) or [{}]
        log.started(template.id, len(targets))
        start = time.perf_counter()

        async with instrument_instance(self._telemetry, template.id, instance.id) as status:
            tasks = [
                asyncio.ensure_future(
                    self._run_target(instance, template, index, target, cancel, log)
                )
                for index, target in enumerate(targets)
            ]
            try:
                outcomes = await self._gather(tasks, cancel)
            except asyncio.CancelledError:
                await self._cancel_tasks(tasks)
                log.cancelled(_elapsed_ms(start))
                raise

            result.duration_ms = _elapsed_ms(start)
            if outcomes is None:
                result.cancelled = True
                status["status"] = MetricLabels.STATUS_CANCELLED
                log.cancelled(result.duration_ms)
                return result

            result.targets = list(outcomes)
            if any(t.status == TargetStatus.CANCELLED for t in result.targets):
                result.cancelled = True
                status["status"] = MetricLabels.STATUS_CANCELLED
                log.cancelled(result.duration_ms)
                return result

            if not result.success:
                status["status"] = MetricLabels.STATUS_ERROR
            log.completed(result.duration_ms, result.succeeded_count, len(result.targets))

        return result

    async def _gather(
        self,
        tasks: list["asyncio.Task[TargetResult]"],
        cancel: asyncio.Event | None,
    ) -> list[TargetResult] | None:
        """Wait for every target, or for ``cancel``. None means cancelled."""
        if cancel is None:
            return await asyncio.gather(*tasks)

        gathered = asyncio.gather(*tasks)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait(
                {gathered, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            waiter.cancel()

        if gathered in done:
            return gathered.result()

        await self._cancel_tasks(tasks)
        return None

    @staticmethod
    async def _cancel_tasks(tasks: list["asyncio.Task[TargetResult]"]) -> None:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _run_target(
        self,
        instance: PluginInstance,
        template: PluginTemplate,
        index: int,
        target: Mapping[str, str],
        cancel: asyncio.Event | None,
        log: InstanceLogger,
    ) -> TargetResult:
        suffix = f".{index}" if instance.has_targets else ""
        instance_key = f"{instance.id}{suffix}"

        delay_ms = index * self._config.execution.target_stagger_ms
        if delay_ms:
            await asyncio.sleep(delay_ms / 1000)

        start = time.perf_counter()
        context = build_context(instance.inputs, target, template)
        execution = template.execution

        def cancelled() -> TargetResult:
            return TargetResult(suffix, TargetStatus.CANCELLED, _elapsed_ms(start))

        try:
            if execution.type == ExecutionType.CHAIN:
                for step in execution.steps:
                    if cancel is not None and cancel.is_set():
                        return cancelled()
                    await self._steps.execute(
                        instance_key, step, context, template.id, log.step(step.id, suffix)
                    )
            else:
                root = execution.root_step()
                raw = await self._steps.execute(
                    instance_key, root, context, template.id, log.step(root.id, suffix)
                )
                if execution.type == ExecutionType.API_TEXT:
                    self._publisher.publish_raw(instance_key, raw or "")
                    return TargetResult(suffix, TargetStatus.SUCCEEDED, _elapsed_ms(start))

            apply_transforms(execution.process, context)

            if cancel is not None and cancel.is_set():
                return cancelled()
            self._publisher.publish(instance.id, template, context, suffix)
            return TargetResult(suffix, TargetStatus.SUCCEEDED, _elapsed_ms(start))

        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = get_error_factory().from_exception(e, instance_id=instance_key)
            if cancel is not None and cancel.is_set():
                return cancelled()

            log.failed(suffix, error)
            if error.is_network:
                self.reset_network_clients(error.code)
            self._publisher.publish_error(instance.id, template, context, suffix)
            return TargetResult(suffix, TargetStatus.FAILED, _elapsed_ms(start), error)

    def clear_cache(self, instance_id: str | None = None) -> int:
        """Drop cached responses, all of them or one instance's.

        Args:
            instance_id: Instance whose entries (every target) to drop

        Returns:
            Number of entries removed
        """
        if instance_id is None:
            return self._cache.clear()
        return self._cache.clear(f"{instance_id}_") + self._cache.clear(f"{instance_id}.")

    def reset_network_clients(self, reason: str = "") -> None:
        """Replace every HTTP client, e.g. after a network change."""
        self._pool.reset(reason)
        if self._telemetry and self._telemetry.metrics:
            self._telemetry.metrics.record_pool_reset()

    async def aclose(self) -> None:
        """Cancel in-flight requests and close every HTTP client."""
        await self._coalescer.aclose()
        await self._pool.aclose()
        if self._owns_telemetry and self._telemetry:
            self._telemetry.shutdown()

    async def __aenter__(self) -> "PluginEngine":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
