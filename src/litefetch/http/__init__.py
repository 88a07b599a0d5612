"""HTTP client pool and raw fetch."""

from .fetch import decode_body, fetch_raw
from .pool import MAX_RETIRED, ClientPool, normalize_proxy

__all__ = [
    "ClientPool",
    "normalize_proxy",
    "MAX_RETIRED",
    "fetch_raw",
    "decode_body",
]
