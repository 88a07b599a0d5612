"""YAML/JSON plugin template and instance parsing.

Documents may use snake_case keys or the camelCase keys found in
templates exported by the desktop widget (``skipIfSet``, ``cacheMinutes``,
``shortLabel``, ``defaultValue``, ...).
"""

from typing import Any

import yaml

from litefetch.errors import FetchError, create_error
from litefetch.transform import TransformRule
from litefetch.types import ExecutionType, HttpMethod, InputScope, ResponseFormat

from .types import (
    ExecutionDefinition,
    InputDefinition,
    OutputDefinition,
    PluginInstance,
    PluginTemplate,
    StepDefinition,
)

_RULE_KEYS = {"var", "function", "source", "args"}


def _get(data: dict[str, Any], *names: str, default: Any = None) -> Any:
    """First present key among snake_case/camelCase aliases."""
    for name in names:
        if name in data and data[name] is not None:
            return data[name]
    return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _str_map(value: Any, path: str, code: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise create_error(code, detail=f"{path} must be a mapping")
    return {str(k): _text(v) for k, v in value.items()}


def _int(value: Any, path: str, code: str, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise create_error(code, detail=f"{path} must be an integer, got {value!r}") from e


def parse_template_yaml(text: str) -> PluginTemplate:
    """Parse a YAML (or JSON) template document.

    Args:
        text: Document content

    Returns:
        Parsed template

    Raises:
        FetchError(TEMPLATE_INVALID) if the document is invalid
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise create_error("TEMPLATE_INVALID", detail=f"Invalid YAML: {e}") from e

    return parse_template_dict(data)


def parse_template_dict(data: Any) -> PluginTemplate:
    """Build a PluginTemplate from a decoded document.

    Args:
        data: Decoded mapping

    Returns:
        Parsed template

    Raises:
        FetchError(TEMPLATE_INVALID) if the document is invalid
    """
    if not isinstance(data, dict):
        raise create_error("TEMPLATE_INVALID", detail="Template must be a mapping")

    template_id = _text(data.get("id")).strip()
    if not template_id:
        raise create_error("TEMPLATE_INVALID", detail="Template id is required")

    meta = data.get("meta") or {}
    if not isinstance(meta, dict):
        raise create_error("TEMPLATE_INVALID", detail="meta must be a mapping")

    def meta_field(name: str, default: str = "") -> str:
        return _text(_get(meta, name, default=_get(data, name, default=default)))

    try:
        inputs = [_parse_input(item, i) for i, item in enumerate(data.get("inputs") or [])]
        execution = _parse_execution(data.get("execution") or {})
        outputs = [_parse_output(item, i) for i, item in enumerate(data.get("outputs") or [])]
    except FetchError:
        raise
    except (TypeError, ValueError, AttributeError) as e:
        raise create_error("TEMPLATE_INVALID", detail=f"Template '{template_id}': {e}") from e

    step_ids = [step.id for step in execution.steps]
    duplicates = sorted({s for s in step_ids if step_ids.count(s) > 1})
    if duplicates:
        raise create_error(
            "TEMPLATE_INVALID",
            detail=f"Template '{template_id}' has duplicate step ids: {', '.join(duplicates)}",
        )

    return PluginTemplate(
        id=template_id,
        name=meta_field("name", template_id),
        version=meta_field("version", "1.0.0"),
        author=meta_field("author"),
        description=meta_field("description"),
        inputs=inputs,
        execution=execution,
        outputs=outputs,
    )


def _parse_input(item: Any, index: int) -> InputDefinition:
    if isinstance(item, str):
        return InputDefinition(key=item)
    if not isinstance(item, dict) or not item.get("key"):
        raise create_error("TEMPLATE_INVALID", detail=f"inputs[{index}] requires a key")

    scope = _text(_get(item, "scope", default="global")).strip().lower()
    try:
        input_scope = InputScope(scope)
    except ValueError as e:
        raise create_error(
            "TEMPLATE_INVALID",
            detail=f"inputs[{index}].scope must be 'global' or 'target', got '{scope}'",
        ) from e

    return InputDefinition(
        key=_text(item["key"]),
        label=_text(item.get("label")),
        default=_text(_get(item, "default", "default_value", "defaultValue")),
        scope=input_scope,
        placeholder=_text(item.get("placeholder")),
    )


def _parse_rules(raw: Any, path: str) -> list[TransformRule]:
    if not raw:
        return []
    if not isinstance(raw, list):
        raise create_error("TEMPLATE_INVALID", detail=f"{path} must be a list")

    rules: list[TransformRule] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or not item.get("var") or not item.get("function"):
            raise create_error(
                "TEMPLATE_INVALID", detail=f"{path}[{i}] requires 'var' and 'function'"
            )
        # Arguments may be nested under "args" or written inline
        args = dict(item.get("args") or {})
        args.update({k: v for k, v in item.items() if k not in _RULE_KEYS})
        rules.append(
            TransformRule(
                var=_text(item["var"]),
                function=_text(item["function"]),
                source=_text(item.get("source")),
                args=args,
            )
        )
    return rules


def _parse_step(item: Any, index: int) -> StepDefinition:
    path = f"execution.steps[{index}]"
    if not isinstance(item, dict):
        raise create_error("TEMPLATE_INVALID", detail=f"{path} must be a mapping")

    url = _text(item.get("url")).strip()
    if not url:
        raise create_error("TEMPLATE_INVALID", detail=f"{path}.url is required")

    return StepDefinition(
        id=_text(item.get("id")) or f"step{index}",
        url=url,
        method=HttpMethod.parse(item.get("method")),
        body=_text(item.get("body")),
        headers=_str_map(item.get("headers"), f"{path}.headers", "TEMPLATE_INVALID"),
        proxy=_text(item.get("proxy")),
        extract=_str_map(item.get("extract"), f"{path}.extract", "TEMPLATE_INVALID"),
        process=_parse_rules(item.get("process"), f"{path}.process"),
        response_format=ResponseFormat.parse(
            _get(item, "response_format", "responseFormat", "format")
        ),
        response_encoding=_get(item, "response_encoding", "responseEncoding") or None,
        skip_if_set=_text(_get(item, "skip_if_set", "skipIfSet")),
        cache_minutes=_int(
            _get(item, "cache_minutes", "cacheMinutes"), f"{path}.cache_minutes", "TEMPLATE_INVALID"
        ),
    )


def _parse_execution(data: Any) -> ExecutionDefinition:
    if not isinstance(data, dict):
        raise create_error("TEMPLATE_INVALID", detail="execution must be a mapping")

    raw_type = _text(data.get("type") or "chain").strip().lower()
    try:
        execution_type = ExecutionType(raw_type)
    except ValueError as e:
        raise create_error(
            "TEMPLATE_INVALID", detail=f"Unknown execution type '{raw_type}'"
        ) from e

    steps = [_parse_step(item, i) for i, item in enumerate(data.get("steps") or [])]
    url = _text(data.get("url")).strip()

    if execution_type == ExecutionType.CHAIN and not steps:
        raise create_error("TEMPLATE_INVALID", detail="chain execution requires steps")
    if execution_type != ExecutionType.CHAIN and not url:
        raise create_error(
            "TEMPLATE_INVALID", detail=f"{execution_type.value} execution requires a url"
        )

    return ExecutionDefinition(
        type=execution_type,
        interval=_int(data.get("interval"), "execution.interval", "TEMPLATE_INVALID", 5),
        url=url,
        method=HttpMethod.parse(data.get("method")),
        body=_text(data.get("body")),
        headers=_str_map(data.get("headers"), "execution.headers", "TEMPLATE_INVALID"),
        extract=_str_map(data.get("extract"), "execution.extract", "TEMPLATE_INVALID"),
        process=_parse_rules(data.get("process"), "execution.process"),
        steps=steps,
    )


def _parse_output(item: Any, index: int) -> OutputDefinition:
    if not isinstance(item, dict) or not item.get("key"):
        raise create_error("TEMPLATE_INVALID", detail=f"outputs[{index}] requires a key")

    return OutputDefinition(
        key=_text(item["key"]),
        format=_text(_get(item, "format", "value")),
        color=_text(item.get("color")),
        unit=_text(item.get("unit")),
        label=_text(item.get("label")),
        short_label=_text(_get(item, "short_label", "shortLabel")),
    )


def parse_instance_dict(data: Any) -> PluginInstance:
    """Build a PluginInstance from a decoded document.

    Args:
        data: Decoded mapping

    Returns:
        Parsed instance

    Raises:
        FetchError(INSTANCE_INVALID) if the document is invalid
    """
    if not isinstance(data, dict):
        raise create_error("INSTANCE_INVALID", detail="Instance must be a mapping")

    instance_id = _text(data.get("id")).strip()
    template_id = _text(_get(data, "template_id", "templateId")).strip()
    if not instance_id or not template_id:
        raise create_error("INSTANCE_INVALID", detail="Instance id and template_id are required")

    raw_targets = data.get("targets") or []
    if not isinstance(raw_targets, list):
        raise create_error("INSTANCE_INVALID", detail="targets must be a list")

    return PluginInstance(
        id=instance_id,
        template_id=template_id,
        inputs=_str_map(
            _get(data, "inputs", "input_values", "inputValues"), "inputs", "INSTANCE_INVALID"
        ),
        targets=[
            _str_map(target, f"targets[{i}]", "INSTANCE_INVALID")
            for i, target in enumerate(raw_targets)
        ],
        custom_interval=_int(
            _get(data, "custom_interval", "customInterval"), "custom_interval", "INSTANCE_INVALID"
        ),
        enabled=bool(data.get("enabled", True)),
    )
