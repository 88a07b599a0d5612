"""In-memory output sink."""

import threading


class MemorySink:
    """Thread-safe dict-backed sink; counts writes for suppression checks."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()
        self.writes = 0

    def get_value(self, key: str) -> str:
        with self._lock:
            return self._values.get(key, "")

    def inject_value(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self.writes += 1

    def snapshot(self) -> dict[str, str]:
        """Copy of every published key."""
        with self._lock:
            return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)
