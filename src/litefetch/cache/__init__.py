"""Step response cache and request coalescing."""

from .coalescer import RequestCoalescer
from .fingerprint import fingerprint
from .store import CacheEntry, CacheLookup, StepCache

__all__ = [
    "fingerprint",
    "StepCache",
    "CacheEntry",
    "CacheLookup",
    "RequestCoalescer",
]
