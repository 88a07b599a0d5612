"""Minimal JSON path lookup: ``data.items[0].price``."""

import json
import re
from decimal import Decimal
from typing import Any

_SEGMENT = re.compile(r"([^.\[\]]+)|\[(\d+)\]")

_MISSING = object()


def parse_json(text: str) -> Any:
    """Decode JSON keeping numbers as Decimal so their text survives."""
    return json.loads(text, parse_float=Decimal)


def _segments(path: str) -> list[str | int]:
    parts: list[str | int] = []
    for name, index in _SEGMENT.findall(path):
        parts.append(int(index) if index else name)
    return parts


def lookup(document: Any, path: str) -> Any:
    """Walk ``path`` through a decoded document.

    ``$`` or an empty path returns the document itself; a leading ``$.``
    is ignored. Numeric dot segments index into lists (``items.0``).

    Returns:
        The node, or None when any segment is missing
    """
    path = path.strip()
    if path.startswith("$"):
        path = path[1:].lstrip(".")
    if not path:
        return document

    node: Any = document
    for segment in _segments(path):
        if isinstance(node, dict):
            node = node.get(str(segment), _MISSING)
        elif isinstance(node, list):
            try:
                node = node[int(segment)]
            except (ValueError, IndexError):
                node = _MISSING
        else:
            node = _MISSING
        if node is _MISSING:
            return None
    return node


def format_json_value(value: Any) -> str:
    """Render a JSON node as a context string.

    Strings raw, booleans ``true``/``false``, null as ``""``, numbers in
    their JSON text form, objects and arrays as compact JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int | Decimal):
        return str(value)
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_decimal_default)


def _decimal_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def lookup_json_path(document: Any, path: str) -> str:
    """Look up ``path`` and format the result; missing members yield ``""``."""
    return format_json_value(lookup(document, path))
