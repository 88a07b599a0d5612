"""Response extraction: json, jsonp and text bodies."""

from .extractor import RAW_BODY_PATH, extract, strip_jsonp
from .jsonpath import format_json_value, lookup, lookup_json_path, parse_json

__all__ = [
    "extract",
    "strip_jsonp",
    "RAW_BODY_PATH",
    "lookup",
    "lookup_json_path",
    "format_json_value",
    "parse_json",
]
