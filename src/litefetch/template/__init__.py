"""Template resolver - {{key}} substitution against a flat context."""

from .resolver import PLACEHOLDER_PATTERN, has_placeholders, resolve

__all__ = [
    "resolve",
    "has_placeholders",
    "PLACEHOLDER_PATTERN",
]
