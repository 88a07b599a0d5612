"""HTTP client pool with reset-on-failure recovery."""

import threading

import httpx

from litefetch.config import HttpConfig
from litefetch.logging import EngineLogger

# Replaced clients kept for aclose(); older ones are left to the garbage collector
MAX_RETIRED = 16


def normalize_proxy(proxy: str) -> str:
    """Add an ``http://`` scheme to bare ``host:port`` proxies."""
    proxy = proxy.strip()
    if proxy and "://" not in proxy:
        return f"http://{proxy}"
    return proxy


class ClientPool:
    """One default client plus lazily created per-proxy clients.

    ``reset()`` swaps the default client and drops the proxy clients under
    a lock. Replaced clients are not closed: requests already running on
    them finish normally, and ``aclose()`` closes them later.

    TLS certificate verification follows ``HttpConfig.verify_tls``, which
    is off by default. Endpoints are user-authored and often self-signed,
    so responses must not be trusted beyond display purposes.
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: EngineLogger | None = None,
    ):
        """Initialize the pool and its default client.

        Args:
            config: HTTP configuration (defaults to HttpConfig())
            transport: Transport for every client; tests pass httpx.MockTransport
            logger: Optional EngineLogger
        """
        self._config = config or HttpConfig()
        self._transport = transport
        self._logger = logger
        self._lock = threading.Lock()
        self._proxy_clients: dict[str, httpx.AsyncClient] = {}
        self._retired: list[httpx.AsyncClient] = []
        self._resets = 0
        self._default = self._create_client()

    @property
    def resets(self) -> int:
        """Number of times the pool has been reset."""
        return self._resets

    @property
    def proxy_count(self) -> int:
        return len(self._proxy_clients)

    def _create_client(self, proxy: str | None = None) -> httpx.AsyncClient:
        kwargs: dict = {
            "timeout": httpx.Timeout(self._config.timeout_seconds),
            "headers": {"User-Agent": self._config.user_agent},
            "verify": self._config.verify_tls,
            "follow_redirects": self._config.follow_redirects,
        }
        if self._transport is not None:
            # A mounted proxy transport would bypass the injected one
            kwargs["transport"] = self._transport
        elif proxy:
            kwargs["proxy"] = proxy
        return httpx.AsyncClient(**kwargs)

    def get(self, proxy: str | None = None) -> httpx.AsyncClient:
        """Client for ``proxy``, or the default client when it is empty.

        Args:
            proxy: Resolved proxy address (``host:port`` or URL)

        Returns:
            Shared client; callers must not close it
        """
        key = normalize_proxy(proxy or "")
        with self._lock:
            if not key:
                return self._default
            client = self._proxy_clients.get(key)
            if client is None:
                client = self._create_client(key)
                self._proxy_clients[key] = client
                if self._logger:
                    self._logger.proxy_client_created(key)
            return client

    def reset(self, reason: str = "") -> None:
        """Replace the default client and forget every proxy client."""
        new_default = self._create_client()
        with self._lock:
            self._retired.append(self._default)
            self._retired.extend(self._proxy_clients.values())
            del self._retired[:-MAX_RETIRED]
            self._proxy_clients.clear()
            self._default = new_default
            self._resets += 1
            resets = self._resets
        if self._logger:
            self._logger.pool_reset(reason or "manual", resets)

    async def aclose(self) -> None:
        """Close current and retired clients."""
        with self._lock:
            clients = [self._default, *self._proxy_clients.values(), *self._retired]
            self._proxy_clients.clear()
            self._retired.clear()
        for client in clients:
            if not client.is_closed:
                await client.aclose()
