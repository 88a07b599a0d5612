"""Shared types for litefetch.

Import from here rather than submodules:
    from litefetch.types import LogLevel, ResponseFormat, HttpMethod
"""

from .enums import (
    ExecutionType,
    HttpMethod,
    InputScope,
    LogFormat,
    LogLevel,
    ResponseFormat,
    TargetStatus,
)
from .validation import ValidationIssue, ValidationResult

__all__ = [
    # Enums
    "LogLevel",
    "LogFormat",
    "HttpMethod",
    "ResponseFormat",
    "ExecutionType",
    "InputScope",
    "TargetStatus",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
