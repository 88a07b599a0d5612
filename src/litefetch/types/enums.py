"""Shared enumerations for litefetch."""

from enum import Enum


class LogLevel(str, Enum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output format."""

    COLORED = "colored"
    JSON = "json"


class HttpMethod(str, Enum):
    """HTTP verbs a step may use."""

    GET = "GET"
    POST = "POST"
    HEAD = "HEAD"

    @classmethod
    def parse(cls, value: "str | HttpMethod | None") -> "HttpMethod":
        """Parse a method name leniently. Unknown or empty names fall back to GET."""
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls((value or "GET").strip().upper())
        except ValueError:
            return cls.GET


class ResponseFormat(str, Enum):
    """How a raw response body is interpreted during extraction."""

    JSON = "json"
    JSONP = "jsonp"
    TEXT = "text"

    @classmethod
    def parse(cls, value: "str | ResponseFormat | None") -> "ResponseFormat":
        """Parse a format hint leniently. Unknown or empty hints mean JSON."""
        if isinstance(value, ResponseFormat):
            return value
        try:
            return cls((value or "json").strip().lower())
        except ValueError:
            return cls.JSON


class ExecutionType(str, Enum):
    """Plugin execution mode."""

    CHAIN = "chain"
    API_JSON = "api_json"
    API_TEXT = "api_text"


class InputScope(str, Enum):
    """Where an input value lives on an instance."""

    GLOBAL = "global"
    TARGET = "target"


class TargetStatus(str, Enum):
    """Outcome of one target's chain."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"
