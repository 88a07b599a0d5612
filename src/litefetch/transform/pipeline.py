"""Ordered application of transform rules to a context."""

import re
from collections.abc import Iterable, MutableMapping

from litefetch.errors import create_error
from litefetch.template import has_placeholders, resolve

from .functions import TRANSFORMS, TransformFunction
from .types import TransformRule

# Failures a transform function may raise on bad data or arguments
_TRANSFORM_ERRORS = (ValueError, TypeError, ZeroDivisionError, OverflowError, OSError, re.error)


def _source_value(rule: TransformRule, context: MutableMapping[str, str]) -> str:
    source = rule.source or rule.var
    if has_placeholders(source):
        return resolve(source, context)
    return context.get(source, "")


def apply_transforms(
    rules: Iterable[TransformRule] | None,
    context: MutableMapping[str, str],
    registry: dict[str, TransformFunction] | None = None,
) -> None:
    """Apply rules in order; each rule sees the writes of the previous ones.

    Args:
        rules: Transform rules, may be None
        context: Context to mutate
        registry: Function registry (defaults to TRANSFORMS)

    Raises:
        FetchError(TRANSFORM_FAILED): Unknown function or bad data
    """
    if not rules:
        return
    functions = TRANSFORMS if registry is None else registry

    for rule in rules:
        function = functions.get(rule.function.strip().lower())
        if function is None:
            raise create_error(
                "TRANSFORM_FAILED",
                function=rule.function,
                var=rule.var,
                detail=f"Unknown transform function '{rule.function}'",
            )
        try:
            context[rule.var] = function(_source_value(rule, context), rule.args, context)
        except _TRANSFORM_ERRORS as e:
            raise create_error(
                "TRANSFORM_FAILED",
                function=rule.function,
                var=rule.var,
                detail=str(e),
            ) from e
