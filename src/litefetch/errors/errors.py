"""Fetch error types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error source categories."""

    NETWORK = "NETWORK"  # connection, DNS, TLS, timeout, non-2xx
    PARSE = "PARSE"  # malformed body, extraction or transform mismatch
    NATIVE = "NATIVE"  # built-in resolver failures
    TEMPLATE = "TEMPLATE"  # invalid plugin template documents
    CONFIG = "CONFIG"
    SYSTEM = "SYSTEM"


@dataclass
class FetchError(Exception):
    """Structured error with context. Base exception for all engine errors."""

    # Identity
    code: str  # e.g., "HTTP_STATUS"
    category: ErrorCategory

    # Messages
    message: str  # Human-readable summary
    detail: str | None = None  # Extended explanation
    suggestion: str | None = None  # Actionable fix

    # Context
    retryable: bool = False
    step_id: str | None = None
    instance_id: str | None = None
    url: str | None = None
    status_code: int | None = None

    cause: "FetchError | None" = None

    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Set Exception message."""
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.detail and self.detail != self.message:
            return f"{self.message}: {self.detail}"
        return self.message

    @property
    def is_network(self) -> bool:
        """Whether this failure warrants recreating the HTTP clients."""
        return self.category == ErrorCategory.NETWORK

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and diagnostics.

        Returns:
            Dictionary representation of the error
        """
        return {
            "code": self.code,
            "category": self.category.value,
            "message": self.message,
            "detail": self.detail,
            "suggestion": self.suggestion,
            "retryable": self.retryable,
            "step_id": self.step_id,
            "instance_id": self.instance_id,
            "url": self.url,
            "status_code": self.status_code,
            "timestamp": self.timestamp.isoformat(),
            "cause": self.cause.to_dict() if self.cause else None,
        }

    def with_context(
        self,
        step_id: str | None = None,
        instance_id: str | None = None,
        url: str | None = None,
    ) -> "FetchError":
        """Return copy with additional context.

        Existing context wins over the new values so the innermost
        step that failed stays attributed.

        Args:
            step_id: Optional step identifier
            instance_id: Optional instance identifier (with target suffix)
            url: Optional resolved request URL

        Returns:
            New FetchError instance with updated context
        """
        return FetchError(
            code=self.code,
            category=self.category,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
            retryable=self.retryable,
            step_id=self.step_id or step_id,
            instance_id=self.instance_id or instance_id,
            url=self.url or url,
            status_code=self.status_code,
            cause=self.cause,
            timestamp=self.timestamp,
        )


@dataclass
class ErrorTemplate:
    """Template for creating errors."""

    code: str
    category: ErrorCategory
    message_template: str  # "Request to '{url}' failed"
    detail_template: str | None = None
    suggestion_template: str | None = None
    default_retryable: bool = False


@dataclass
class MatchResult:
    """Result of matching an exception."""

    code: str
    context: dict[str, Any]
    retryable: bool | None = None  # None = use template default


class ErrorMatcher(ABC):
    """Base class for exception matchers."""

    @abstractmethod
    def matches(self, error: BaseException) -> bool:
        """Check if this matcher handles the error."""

    @abstractmethod
    def extract(self, error: BaseException) -> MatchResult:
        """Extract error code and context from the exception."""
