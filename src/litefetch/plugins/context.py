"""Context construction with one precedence rule.

Precedence, highest first: target inputs, global inputs, template defaults.
Defaults only fill keys that are absent; an explicit empty value is kept.
"""

from collections.abc import Mapping

from .types import PluginTemplate


def build_context(
    global_inputs: Mapping[str, str],
    target_inputs: Mapping[str, str] | None,
    template: PluginTemplate,
) -> dict[str, str]:
    """Build a fresh context for one (instance, target) execution.

    Args:
        global_inputs: Instance-level input values
        target_inputs: Values of one target (None for the implicit target)
        template: Template supplying declared defaults

    Returns:
        New mutable context; never shared between targets
    """
    context = {k: str(v) for k, v in global_inputs.items()}
    if target_inputs:
        context.update({k: str(v) for k, v in target_inputs.items()})
    return _fill_defaults(context, template)


def label_context(context: Mapping[str, str], template: PluginTemplate) -> dict[str, str]:
    """Copy of ``context`` with input defaults substituted for missing keys."""
    return _fill_defaults(dict(context), template)


def _fill_defaults(context: dict[str, str], template: PluginTemplate) -> dict[str, str]:
    for key, default in template.defaults().items():
        if key not in context:
            context[key] = default
    return context
