"""Publishing resolved outputs, error sentinels and labels to the sink."""

from collections.abc import Mapping

from litefetch.plugins import OutputDefinition, PluginTemplate, label_context
from litefetch.sink import STATUS_EMPTY, STATUS_ERROR, OutputSink, inject_if_changed, output_keys
from litefetch.template import resolve


def label_pattern(template: PluginTemplate, output: OutputDefinition) -> str:
    """Output label, or ``"{template name} {output key}"`` when none is declared."""
    return output.label or f"{template.name} {output.key}"


class OutputPublisher:
    """Writes one target's outputs with read-before-write suppression."""

    def __init__(self, sink: OutputSink):
        self._sink = sink

    @property
    def sink(self) -> OutputSink:
        return self._sink

    def publish(
        self,
        instance_id: str,
        template: PluginTemplate,
        context: Mapping[str, str],
        suffix: str = "",
    ) -> int:
        """Publish every declared output after a successful chain.

        Args:
            instance_id: Instance identifier
            template: Template declaring the outputs
            context: Final target context
            suffix: Target key suffix

        Returns:
            Number of sink writes performed
        """
        labels = label_context(context, template)
        writes = 0
        for output in template.outputs:
            keys = output_keys(instance_id, suffix, output.key)

            value = resolve(output.format, context) or STATUS_EMPTY
            writes += inject_if_changed(self._sink, keys.value, value)

            if output.color:
                writes += inject_if_changed(self._sink, keys.color, resolve(output.color, context))
            if output.unit:
                writes += inject_if_changed(self._sink, keys.unit, resolve(output.unit, context))

            writes += inject_if_changed(
                self._sink, keys.label, resolve(label_pattern(template, output), labels)
            )
            writes += inject_if_changed(
                self._sink, keys.short_label, resolve(output.short_label, labels)
            )
        return writes

    def publish_error(
        self,
        instance_id: str,
        template: PluginTemplate,
        context: Mapping[str, str],
        suffix: str = "",
    ) -> None:
        """Mark every output as failed while keeping its label readable.

        Label resolution is best-effort: when it fails, the raw label
        pattern is published so the item is still identifiable by name.
        """
        for output in template.outputs:
            keys = output_keys(instance_id, suffix, output.key)
            inject_if_changed(self._sink, keys.value, STATUS_ERROR)

            pattern = label_pattern(template, output)
            try:
                labels = label_context(context, template)
                name = resolve(pattern, labels)
                short = resolve(output.short_label, labels)
            except Exception:  # noqa: BLE001 - fall back to the unresolved pattern
                inject_if_changed(self._sink, keys.label, pattern)
                continue
            inject_if_changed(self._sink, keys.label, name)
            inject_if_changed(self._sink, keys.short_label, short)

    def publish_raw(self, instance_key: str, raw: str) -> None:
        """Publish a raw body under ``{instance_id}{suffix}`` (api_text)."""
        inject_if_changed(self._sink, instance_key, raw)
