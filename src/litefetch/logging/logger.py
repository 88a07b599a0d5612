"""Engine logger - hierarchical colored logging for plugin execution."""

import json
import sys
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TextIO

from litefetch.logging.colors import (
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
from litefetch.types import LogFormat, LogLevel

COMPONENTS = ("engine", "instance", "step", "http", "cache")


@dataclass
class LogConfig:
    """Logger configuration."""

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.COLORED
    show_context: bool = True
    truncate_at: int = 200
    components: dict[str, bool] = field(default_factory=dict)
    output: TextIO = field(default=sys.stderr)

    def __post_init__(self) -> None:
        """Initialize default components if not provided."""
        if not self.components:
            self.components = dict.fromkeys(COMPONENTS, True)


class EngineLogger:
    """Main logger facade. Creates instance- and step-scoped loggers."""

    def __init__(self, config: LogConfig | None = None):
        """Initialize logger with configuration.

        Args:
            config: Logger configuration (defaults to LogConfig())
        """
        self.config = config or LogConfig()
        self._level_order = {
            LogLevel.DEBUG: 0,
            LogLevel.INFO: 1,
            LogLevel.WARN: 2,
            LogLevel.ERROR: 3,
        }

    def instance(self, instance_id: str) -> "InstanceLogger":
        """Get a logger scoped to one plugin instance execution.

        Args:
            instance_id: Plugin instance identifier

        Returns:
            InstanceLogger instance
        """
        return InstanceLogger(self, instance_id)

    def configure(self, config: LogConfig) -> None:
        """Update configuration (for hot-reload)."""
        self.config = config

    # Engine-wide events, not tied to one instance

    def pool_reset(self, reason: str, resets: int) -> None:
        """Log HTTP client pool recovery."""
        self._log(
            LogLevel.WARN,
            "http",
            f"HTTP clients recreated after network failure: {reason}",
            {"event": "pool_reset", "reason": reason, "resets": resets},
        )

    def proxy_client_created(self, proxy: str) -> None:
        self._log(
            LogLevel.DEBUG,
            "http",
            f"Created client for proxy {proxy}",
            {"event": "proxy_client_created", "proxy": proxy},
        )

    def cache_evicted(self, evicted: int, remaining: int) -> None:
        self._log(
            LogLevel.DEBUG,
            "cache",
            f"Evicted {evicted} oldest cache entries",
            {"event": "cache_evicted", "evicted": evicted, "remaining": remaining},
        )

    def cache_rejected(self, key: str, size: int, limit: int) -> None:
        """Log a response body too large to cache."""
        self._log(
            LogLevel.WARN,
            "cache",
            f"Response too large to cache ({size} > {limit} bytes)",
            {"event": "cache_rejected", "key": key, "size": size, "limit": limit},
        )

    def cache_cleared(self, prefix: str | None, removed: int) -> None:
        self._log(
            LogLevel.INFO,
            "cache",
            f"Cleared {removed} cache entries" + (f" for '{prefix}'" if prefix else ""),
            {"event": "cache_cleared", "prefix": prefix, "removed": removed},
        )

    def _should_log(self, level: LogLevel) -> bool:
        """Check if a log level should be logged.

        Args:
            level: Log level to check

        Returns:
            True if should log, False otherwise
        """
        return self._level_order.get(level, 0) >= self._level_order.get(self.config.level, 1)

    def _log(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Internal logging method.

        Args:
            level: Log level
            component: Component name (engine, instance, step, http, cache)
            message: Log message
            context: Additional context data
        """
        if not self._should_log(level):
            return

        if not self.config.components.get(component, True):
            return

        if self.config.format == LogFormat.JSON:
            self._log_json(level, component, message, context)
        else:
            self._log_colored(level, component, message, context)

    def _log_json(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        log_entry: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": level.value,
            "component": component,
            "message": message,
        }
        if context:
            log_entry.update(context)

        print(json.dumps(log_entry, default=str), file=self.config.output)

    def _log_colored(
        self,
        level: LogLevel,
        component: str,
        message: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        level_colors = {
            LogLevel.DEBUG: LIGHT_BLUE,
            LogLevel.INFO: CYAN,
            LogLevel.WARN: YELLOW,
            LogLevel.ERROR: RED,
        }

        color = level_colors.get(level, RESET)
        component_color = {
            "engine": MAGENTA,
            "instance": MAGENTA,
            "step": CYAN,
            "http": GREEN,
            "cache": ORANGE,
        }.get(component, RESET)

        # Format: [COMPONENT] message
        output = f"{component_color}[{component.upper()}]{RESET} {color}{message}{RESET}"

        if context and self.config.show_context:
            context_str = str(context)
            if len(context_str) > self.config.truncate_at:
                context_str = context_str[: self.config.truncate_at] + "..."
            output += f" {LIGHT_BLUE}{context_str}{RESET}"

        print(output, file=self.config.output)


class InstanceLogger:
    """Logger for instance-level events."""

    def __init__(self, parent: EngineLogger, instance_id: str):
        """Initialize instance logger.

        Args:
            parent: Parent EngineLogger instance
            instance_id: Plugin instance identifier
        """
        self.parent = parent
        self.instance_id = instance_id

    def started(self, template_id: str, target_count: int) -> None:
        """Log instance execution start.

        Args:
            template_id: Template the instance uses
            target_count: Number of targets fanned out
        """
        context = {
            "instance_id": self.instance_id,
            "template_id": template_id,
            "event": "instance_started",
            "targets": target_count,
        }
        message = f"Instance '{self.instance_id}' started ({target_count} target(s))"
        self.parent._log(LogLevel.DEBUG, "instance", message, context)

    def completed(self, duration_ms: int, succeeded: int, total: int) -> None:
        """Log instance completion with summary.

        Args:
            duration_ms: Execution duration in milliseconds
            succeeded: Number of targets that succeeded
            total: Number of targets executed
        """
        context = {
            "instance_id": self.instance_id,
            "event": "instance_completed",
            "duration_ms": duration_ms,
            "succeeded": succeeded,
            "targets": total,
        }
        duration_s = duration_ms / 1000
        mark = "✓" if succeeded else "✗"
        message = (
            f"Instance '{self.instance_id}' completed "
            f"({succeeded}/{total} targets, {duration_s:.2f}s) {mark}"
        )
        self.parent._log(LogLevel.INFO, "instance", message, context)

    def failed(self, suffix: str, error: Exception) -> None:
        """Log a target failure.

        Args:
            suffix: Target key suffix ("" or ".{i}")
            error: Exception that caused failure
        """
        context: dict[str, Any] = {
            "instance_id": self.instance_id,
            "target": suffix,
            "event": "target_failed",
            "error": str(error),
            "error_type": type(error).__name__,
        }
        code = getattr(error, "code", None)
        if code:
            context["error_code"] = code

        message = f"Target '{self.instance_id}{suffix}' failed: {error}"
        self.parent._log(LogLevel.ERROR, "instance", message, context)

    def cancelled(self, duration_ms: int) -> None:
        """Log caller-initiated cancellation. Never an error."""
        context = {
            "instance_id": self.instance_id,
            "event": "instance_cancelled",
            "duration_ms": duration_ms,
        }
        message = f"{GREY}Instance '{self.instance_id}' cancelled{RESET}"
        self.parent._log(LogLevel.INFO, "instance", message, context)

    def step(self, step_id: str, suffix: str = "") -> "StepLogger":
        """Get a logger scoped to a step of one target.

        Args:
            step_id: Step identifier
            suffix: Target key suffix

        Returns:
            StepLogger instance
        """
        return StepLogger(self, step_id, suffix)


class StepLogger:
    """Logger for step-level events."""

    def __init__(self, parent: InstanceLogger, step_id: str, suffix: str = ""):
        self.parent = parent
        self.step_id = step_id
        self.suffix = suffix

    def _context(self, event: str, **extra: Any) -> dict[str, Any]:
        context = {
            "instance_id": self.parent.instance_id,
            "target": self.suffix,
            "step_id": self.step_id,
            "event": event,
        }
        context.update(extra)
        return context

    def _emit(self, level: LogLevel, message: str, context: dict[str, Any]) -> None:
        self.parent.parent._log(level, "step", message, context)

    def skipped(self, key: str) -> None:
        """Log skip guard hit.

        Args:
            key: Context key that was already set
        """
        self._emit(
            LogLevel.DEBUG,
            f"Step '{self.step_id}' skipped: '{key}' already set",
            self._context("step_skipped", key=key),
        )

    def cache_hit(self, age_seconds: float) -> None:
        self._emit(
            LogLevel.DEBUG,
            f"Step '{self.step_id}' served from cache ({age_seconds:.1f}s old)",
            self._context("step_cache_hit", age_seconds=round(age_seconds, 3)),
        )

    def fetched(self, url: str, duration_ms: int, native: bool = False) -> None:
        """Log a completed fetch.

        Args:
            url: Resolved request URL
            duration_ms: Fetch duration in milliseconds
            native: Whether a native resolver served the request
        """
        source = "native" if native else "http"
        self._emit(
            LogLevel.DEBUG,
            f"Step '{self.step_id}' fetched via {source} ({duration_ms}ms) ✓",
            self._context("step_fetched", url=url, duration_ms=duration_ms, source=source),
        )

    def coalesced(self, url: str) -> None:
        self._emit(
            LogLevel.DEBUG,
            f"Step '{self.step_id}' joined in-flight request",
            self._context("step_coalesced", url=url),
        )

    def not_cached(self, reason: str) -> None:
        self._emit(
            LogLevel.DEBUG,
            f"Step '{self.step_id}' response not cached: {reason}",
            self._context("step_not_cached", reason=reason),
        )

    def failed(self, error: Exception) -> None:
        """Log step failure.

        Args:
            error: Exception that caused failure
        """
        self._emit(
            LogLevel.WARN,
            f"Step '{self.step_id}' failed: {error}",
            self._context("step_failed", error=str(error), error_type=type(error).__name__),
        )
