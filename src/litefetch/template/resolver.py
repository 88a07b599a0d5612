"""Placeholder resolution for plugin templates."""

import re
from collections.abc import Mapping

# {{key}} or {{ key }}; keys never contain braces
PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def resolve(template: str | None, context: Mapping[str, str]) -> str:
    """Substitute every ``{{key}}`` in ``template`` with ``context[key]``.

    Missing keys resolve to the empty string. Resolution is a single pass:
    text produced by a substitution is never scanned again, so a context
    value that itself contains ``{{x}}`` is emitted verbatim.

    Args:
        template: Text that may contain placeholders
        context: Flat string-keyed values

    Returns:
        Resolved text ("" for a None or empty template)
    """
    if not template:
        return ""
    if "{{" not in template:
        return template

    def replace(match: re.Match[str]) -> str:
        value = context.get(match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(replace, template)


def has_placeholders(template: str | None) -> bool:
    """Check if text contains any ``{{ }}`` placeholder."""
    return bool(template) and PLACEHOLDER_PATTERN.search(template) is not None
