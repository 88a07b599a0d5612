"""Transform function implementations.

Every function takes the current source value, the rule arguments and the
context, and returns the new string value for the rule's ``var``.
"""

import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from litefetch.template import resolve

TransformFunction = Callable[[str, Mapping[str, Any], Mapping[str, str]], str]


def _to_float(value: str) -> float | None:
    try:
        return float(value.strip().replace(",", ""))
    except (ValueError, AttributeError):
        return None


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def transform_set(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    """Set a literal or templated value: ``args.value``."""
    return resolve(str(args.get("value", "")), context)


def transform_map(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    """Look the value up in ``args.map``.

    Falls back to ``args.default`` when given, else leaves the value as is.
    """
    mapping = args.get("map") or {}
    key = value.strip()
    if key in mapping:
        return resolve(str(mapping[key]), context)
    if "default" in args:
        return resolve(str(args["default"]), context)
    return value


def transform_number(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    """Parse a number, scale it and format with fixed decimals.

    Args (all optional): multiply, divide, add, decimals (default 2),
    default (used when the value is not numeric).
    """
    number = _to_float(value)
    if number is None:
        return str(args.get("default", ""))

    if "multiply" in args:
        number *= float(args["multiply"])
    if "divide" in args:
        number /= float(args["divide"])
    if "add" in args:
        number += float(args["add"])

    decimals = int(args.get("decimals", 2))
    return f"{number:.{decimals}f}"


def transform_threshold(
    value: str, args: Mapping[str, Any], context: Mapping[str, str]
) -> str:
    """Map a number to a color state: 0 normal, 1 warning, 2 critical.

    ``args.warn`` / ``args.crit`` are inclusive lower bounds; with
    ``args.reverse`` they become inclusive upper bounds (low is bad).
    """
    number = _to_float(value)
    if number is None:
        return str(args.get("default", "0"))

    warn = _to_float(resolve(str(args.get("warn", "")), context))
    crit = _to_float(resolve(str(args.get("crit", "")), context))

    if _truthy(args.get("reverse", False)):
        if crit is not None and number <= crit:
            return "2"
        if warn is not None and number <= warn:
            return "1"
        return "0"

    if crit is not None and number >= crit:
        return "2"
    if warn is not None and number >= warn:
        return "1"
    return "0"


def transform_replace(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    old = str(args.get("old", ""))
    if not old:
        return value
    return value.replace(old, resolve(str(args.get("new", "")), context))


def transform_regex(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    """First capture group (or whole match) of ``args.pattern``."""
    match = re.search(str(args.get("pattern", "")), value)
    if match is None:
        return str(args.get("default", ""))
    return match.group(1) if match.groups() else match.group(0)


def transform_upper(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    return value.upper()


def transform_lower(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    return value.lower()


def transform_trim(value: str, args: Mapping[str, Any], context: Mapping[str, str]) -> str:
    return value.strip()


def transform_timestamp(
    value: str, args: Mapping[str, Any], context: Mapping[str, str]
) -> str:
    """Format a unix timestamp in local time.

    Values above 1e11 are taken as milliseconds. ``args.format`` is a
    strftime pattern (default ``%H:%M``).
    """
    number = _to_float(value)
    if number is None:
        return str(args.get("default", ""))
    if number > 1e11:
        number /= 1000
    return datetime.fromtimestamp(number).strftime(str(args.get("format", "%H:%M")))


# Registry of available transforms
TRANSFORMS: dict[str, TransformFunction] = {
    "set": transform_set,
    "map": transform_map,
    "number": transform_number,
    "threshold": transform_threshold,
    "replace": transform_replace,
    "regex": transform_regex,
    "upper": transform_upper,
    "lower": transform_lower,
    "trim": transform_trim,
    "timestamp": transform_timestamp,
}
