"""Execution result types."""

from dataclasses import dataclass, field

from litefetch.errors import FetchError
from litefetch.types import TargetStatus


@dataclass
class TargetResult:
    """Outcome of one target's chain."""

    suffix: str  # "" or ".{index}"
    status: TargetStatus
    duration_ms: int = 0
    error: FetchError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == TargetStatus.SUCCEEDED


@dataclass
class InstanceResult:
    """Outcome of one instance execution across its targets."""

    instance_id: str
    targets: list[TargetResult] = field(default_factory=list)
    cancelled: bool = False
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        """True when at least one target succeeded."""
        return not self.cancelled and any(t.succeeded for t in self.targets)

    @property
    def succeeded_count(self) -> int:
        return sum(1 for t in self.targets if t.succeeded)

    @property
    def errors(self) -> list[FetchError]:
        return [t.error for t in self.targets if t.error is not None]
