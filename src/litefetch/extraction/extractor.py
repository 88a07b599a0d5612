"""Response body extraction into the context."""

import json
from collections.abc import Mapping, MutableMapping

from litefetch.errors import create_error
from litefetch.template import resolve
from litefetch.types import ResponseFormat

from .jsonpath import lookup_json_path, parse_json

RAW_BODY_PATH = "$"


def strip_jsonp(text: str) -> str:
    """Remove one layer of ``callback(...)`` / ``(...)`` wrapping."""
    text = text.strip()
    start = text.find("(")
    end = text.rfind(")")
    if start == -1 or end <= start:
        return text
    # Only strip when the prefix is a callback name, not JSON content
    if text[:start].strip().startswith(("{", "[")):
        return text
    return text[start + 1 : end].strip()


def extract(
    raw: str,
    rules: Mapping[str, str] | None,
    context: MutableMapping[str, str],
    response_format: ResponseFormat | str = ResponseFormat.JSON,
) -> None:
    """Apply extraction rules to a raw body, writing into ``context``.

    Rule values are paths; each is resolved against the context first so
    paths like ``rates.{{to}}`` follow earlier inputs and steps.

    Args:
        raw: Decoded response body
        rules: Context key -> path
        context: Context to mutate
        response_format: json, jsonp or text

    Raises:
        FetchError(PARSE_FAILED): Body is not the declared format
    """
    if not rules:
        return

    fmt = ResponseFormat.parse(response_format)

    if fmt == ResponseFormat.TEXT:
        for key, path in rules.items():
            if path.strip() == RAW_BODY_PATH:
                context[key] = raw
        return

    body = raw.strip()
    if fmt == ResponseFormat.JSONP:
        body = strip_jsonp(body)

    if not body.startswith(("{", "[")):
        preview = body[:80]
        raise create_error(
            "PARSE_FAILED",
            response_format=fmt.value,
            detail=f"Expected a JSON document, got: {preview!r}",
        )

    try:
        document = parse_json(body)
    except json.JSONDecodeError as e:
        raise create_error("PARSE_FAILED", response_format=fmt.value, detail=str(e)) from e

    for key, path in rules.items():
        context[key] = lookup_json_path(document, resolve(path, context))
