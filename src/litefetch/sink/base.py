"""Output sink contract and key naming."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol, runtime_checkable

STATUS_EMPTY = "-"
STATUS_ERROR = "Err"

LABEL_PREFIX = "PROP.Label."
SHORT_LABEL_PREFIX = "PROP.ShortLabel."
DASH_PREFIX = "DASH."


@runtime_checkable
class OutputSink(Protocol):
    """Key/value store read by the renderer."""

    def get_value(self, key: str) -> str:
        """Current value, ``""`` when the key was never written."""
        ...

    def inject_value(self, key: str, value: str) -> None:
        """Publish a value."""
        ...


@dataclass(frozen=True)
class SinkKeys:
    """Every sink key one output writes to."""

    value: str
    color: str
    unit: str
    label: str
    short_label: str

    @classmethod
    def for_output(cls, instance_id: str, suffix: str, output_key: str) -> "SinkKeys":
        return output_keys(instance_id, suffix, output_key)


@lru_cache(maxsize=4096)
def output_keys(instance_id: str, suffix: str, output_key: str) -> SinkKeys:
    """Key set for ``{instance_id}{suffix}.{output_key}`` (memoized)."""
    base = f"{instance_id}{suffix}.{output_key}"
    item = DASH_PREFIX + base
    return SinkKeys(
        value=base,
        color=f"{base}.Color",
        unit=f"{base}.Unit",
        label=LABEL_PREFIX + item,
        short_label=SHORT_LABEL_PREFIX + item,
    )


def inject_if_changed(sink: OutputSink, key: str, value: str) -> bool:
    """Write only when the value differs. Returns whether it wrote."""
    if sink.get_value(key) == value:
        return False
    sink.inject_value(key, value)
    return True
