"""Native resolver registry."""

from .registry import (
    NATIVE_SCHEME,
    NativeResolver,
    NativeResolverRegistry,
    is_native,
    parse_native_url,
)

__all__ = [
    "NativeResolverRegistry",
    "NativeResolver",
    "NATIVE_SCHEME",
    "is_native",
    "parse_native_url",
]
