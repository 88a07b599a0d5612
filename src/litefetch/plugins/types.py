"""Plugin template and instance data model types."""

from dataclasses import dataclass, field

from litefetch.transform import TransformRule
from litefetch.types import ExecutionType, HttpMethod, InputScope, ResponseFormat


@dataclass
class InputDefinition:
    """Template input definition."""

    key: str
    label: str = ""
    default: str = ""
    scope: InputScope = InputScope.GLOBAL
    placeholder: str = ""


@dataclass
class StepDefinition:
    """One request + extract + transform unit of a chain."""

    id: str
    url: str  # "https://api.example.com/{{symbol}}" or "native://host?a={{x}}"
    method: HttpMethod = HttpMethod.GET
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    proxy: str = ""

    # Extraction and transform
    extract: dict[str, str] = field(default_factory=dict)  # context key -> path
    process: list[TransformRule] = field(default_factory=list)
    response_format: ResponseFormat = ResponseFormat.JSON
    response_encoding: str | None = None  # e.g. "gbk"

    skip_if_set: str = ""
    cache_minutes: int = 0  # <= 0 never caches


@dataclass
class OutputDefinition:
    """Named result published to the sink."""

    key: str
    format: str = ""  # Value template
    color: str = ""
    unit: str = ""
    label: str = ""
    short_label: str = ""


@dataclass
class ExecutionDefinition:
    """How a template fetches its data.

    ``chain`` runs ``steps`` in order. ``api_json`` and ``api_text`` issue
    the single request described by the execution-level fields.
    """

    type: ExecutionType = ExecutionType.CHAIN
    interval: int = 5  # Seconds between refreshes
    url: str = ""
    method: HttpMethod = HttpMethod.GET
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    extract: dict[str, str] = field(default_factory=dict)
    process: list[TransformRule] = field(default_factory=list)
    steps: list[StepDefinition] = field(default_factory=list)

    def root_step(self) -> StepDefinition:
        """Express an ``api_json``/``api_text`` execution as a single step."""
        return StepDefinition(
            id="root",
            url=self.url,
            method=self.method,
            body=self.body,
            headers=self.headers,
            extract=self.extract if self.type == ExecutionType.API_JSON else {},
        )


@dataclass
class PluginTemplate:
    """Immutable definition of a plugin kind."""

    id: str
    name: str = ""
    version: str = "1.0.0"
    author: str = ""
    description: str = ""
    inputs: list[InputDefinition] = field(default_factory=list)
    execution: ExecutionDefinition = field(default_factory=ExecutionDefinition)
    outputs: list[OutputDefinition] = field(default_factory=list)

    def global_inputs(self) -> list[InputDefinition]:
        return [i for i in self.inputs if i.scope == InputScope.GLOBAL]

    def target_inputs(self) -> list[InputDefinition]:
        return [i for i in self.inputs if i.scope == InputScope.TARGET]

    def defaults(self) -> dict[str, str]:
        """Declared default value per input key."""
        return {i.key: i.default for i in self.inputs}


@dataclass
class PluginInstance:
    """A configured usage of a template."""

    id: str
    template_id: str
    inputs: dict[str, str] = field(default_factory=dict)
    targets: list[dict[str, str]] = field(default_factory=list)
    custom_interval: int = 0
    enabled: bool = True

    @property
    def has_targets(self) -> bool:
        return bool(self.targets)

    def effective_interval(self, template: PluginTemplate) -> int:
        """Refresh interval in seconds: custom override when positive."""
        if self.custom_interval > 0:
            return self.custom_interval
        return template.execution.interval
