"""Output sink contract, key naming and in-memory sink."""

from .base import (
    STATUS_EMPTY,
    STATUS_ERROR,
    OutputSink,
    SinkKeys,
    inject_if_changed,
    output_keys,
)
from .memory import MemorySink

__all__ = [
    "OutputSink",
    "SinkKeys",
    "output_keys",
    "inject_if_changed",
    "MemorySink",
    "STATUS_EMPTY",
    "STATUS_ERROR",
]
