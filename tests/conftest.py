"""
Pytest configuration and shared fixtures for litefetch tests.
"""

import asyncio
import io
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from litefetch.config import EngineConfig, ExecutionConfig  # noqa: E402
from litefetch.engine import PluginEngine  # noqa: E402
from litefetch.logging import EngineLogger, LogConfig  # noqa: E402
from litefetch.sink import MemorySink  # noqa: E402
from litefetch.types import LogLevel  # noqa: E402

Responder = Callable[[httpx.Request], httpx.Response | Awaitable[httpx.Response]]


# =============================================================================
# Fakes
# =============================================================================


class FakeClock:
    """Controllable monotonic clock for cache TTL tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """Routes requests by URL prefix to canned responses and records them.

    Responders are called per request so every call gets a fresh
    httpx.Response.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Responder] = {}
        self.requests: list[httpx.Request] = []
        self.delay = 0.0

    def route(self, prefix: str, responder: Responder) -> None:
        self.routes[prefix] = responder

    def json(self, prefix: str, payload: Any, status: int = 200) -> None:
        self.route(prefix, lambda request: httpx.Response(status, json=payload))

    def text(self, prefix: str, body: str, status: int = 200) -> None:
        self.route(prefix, lambda request: httpx.Response(status, text=body))

    def status(self, prefix: str, status: int) -> None:
        self.route(prefix, lambda request: httpx.Response(status, text="error"))

    def count(self, prefix: str = "") -> int:
        return sum(1 for r in self.requests if str(r.url).startswith(prefix))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        url = str(request.url)
        # Longest prefix wins
        for prefix in sorted(self.routes, key=len, reverse=True):
            if url.startswith(prefix):
                response = self.routes[prefix](request)
                if not isinstance(response, httpx.Response):
                    response = await response
                return response
        return httpx.Response(404, text="not found")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock starting at t=1000s."""
    return FakeClock()


@pytest.fixture
def sink() -> MemorySink:
    """Return an empty in-memory sink."""
    return MemorySink()


@pytest.fixture
def upstream() -> FakeUpstream:
    """Return a fake upstream with no routes."""
    return FakeUpstream()


@pytest.fixture
def log_output() -> io.StringIO:
    """Buffer capturing engine log lines."""
    return io.StringIO()


@pytest.fixture
def logger(log_output: io.StringIO) -> EngineLogger:
    """Debug-level logger writing to log_output."""
    return EngineLogger(LogConfig(level=LogLevel.DEBUG, output=log_output))


@pytest.fixture
def engine_config() -> EngineConfig:
    """Default config without target stagger."""
    return EngineConfig(execution=ExecutionConfig(target_stagger_ms=0))


@pytest.fixture
def make_engine(
    sink: MemorySink,
    upstream: FakeUpstream,
    clock: FakeClock,
    logger: EngineLogger,
    engine_config: EngineConfig,
):
    """Factory building engines wired to the shared fakes."""
    engines: list[PluginEngine] = []

    def _make(**kwargs: Any) -> PluginEngine:
        kwargs.setdefault("transport", upstream.transport)
        kwargs.setdefault("logger", logger)
        kwargs.setdefault("clock", clock)
        engine = PluginEngine(sink, kwargs.pop("config", engine_config), **kwargs)
        engines.append(engine)
        return engine

    return _make


# =============================================================================
# Markers Configuration
# =============================================================================


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "property: Property-based tests")
    config.addinivalue_line("markers", "slow: Slow tests")
