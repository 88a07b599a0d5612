"""Unit tests for native resolver dispatch."""

import httpx
import pytest

from litefetch.errors import FetchError
from litefetch.native import NativeResolverRegistry, is_native, parse_native_url


class TestNativeUrls:
    """Tests for native URL helpers."""

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("native://cpu", True),
            ("NATIVE://cpu?core=1", True),
            ("https://native.example.com", False),
            ("", False),
        ],
    )
    def test_is_native(self, url, expected):
        assert is_native(url) is expected

    def test_parse_lowercases_host_and_names(self):
        """Test host and arg names are case-insensitive, values decoded."""
        host, args = parse_native_url("native://Ping?Host=example.com&Label=a%20b&empty=")
        assert host == "ping"
        assert args == {"host": "example.com", "label": "a b", "empty": ""}


class TestNativeResolverRegistry:
    """Tests for NativeResolverRegistry.resolve()."""

    @pytest.mark.asyncio
    async def test_dispatches_to_resolver(self):
        registry = NativeResolverRegistry()
        seen: list[dict[str, str]] = []

        async def cpu(args: dict[str, str]) -> str:
            seen.append(args)
            return '{"load": 12}'

        registry.register("CPU", cpu)

        assert await registry.resolve("native://cpu?core=0") == '{"load": 12}'
        assert seen == [{"core": "0"}]
        assert registry.hosts() == ["cpu"]

    @pytest.mark.asyncio
    async def test_unknown_host(self):
        registry = NativeResolverRegistry()
        with pytest.raises(FetchError) as exc_info:
            await registry.resolve("native://gpu")
        assert exc_info.value.code == "NATIVE_UNKNOWN"
        assert "gpu" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_plain_failure_is_native_failed(self):
        """Test resolver bugs are not treated as network failures."""
        registry = NativeResolverRegistry()

        async def broken(args: dict[str, str]) -> str:
            raise KeyError("sensor")

        registry.register("disk", broken)
        with pytest.raises(FetchError) as exc_info:
            await registry.resolve("native://disk")

        assert exc_info.value.code == "NATIVE_FAILED"
        assert not exc_info.value.is_network

    @pytest.mark.asyncio
    async def test_network_failure_keeps_category(self):
        """Test a resolver's own HTTP failure stays a network error."""
        registry = NativeResolverRegistry()

        async def ping(args: dict[str, str]) -> str:
            raise httpx.ConnectError("unreachable")

        registry.register("ping", ping)
        with pytest.raises(FetchError) as exc_info:
            await registry.resolve("native://ping?host=x")

        assert exc_info.value.code == "FETCH_FAILED"
        assert exc_info.value.is_network

    @pytest.mark.asyncio
    async def test_unregister(self):
        registry = NativeResolverRegistry()

        async def noop(args: dict[str, str]) -> str:
            return ""

        registry.register("a", noop)
        assert registry.unregister("A")
        assert not registry.unregister("a")
