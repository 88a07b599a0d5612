"""Plugin templates, instances and context construction."""

from .context import build_context, label_context
from .parser import parse_instance_dict, parse_template_dict, parse_template_yaml
from .types import (
    ExecutionDefinition,
    InputDefinition,
    OutputDefinition,
    PluginInstance,
    PluginTemplate,
    StepDefinition,
)

__all__ = [
    # Types
    "InputDefinition",
    "StepDefinition",
    "OutputDefinition",
    "ExecutionDefinition",
    "PluginTemplate",
    "PluginInstance",
    # Context
    "build_context",
    "label_context",
    # Parsing
    "parse_template_yaml",
    "parse_template_dict",
    "parse_instance_dict",
]
