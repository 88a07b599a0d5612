"""Unit tests for context construction."""

from litefetch.plugins import (
    InputDefinition,
    OutputDefinition,
    PluginTemplate,
    build_context,
    label_context,
)
from litefetch.types import InputScope


def make_template() -> PluginTemplate:
    return PluginTemplate(
        id="weather",
        name="Weather",
        inputs=[
            InputDefinition(key="city", default="NYC"),
            InputDefinition(key="units", default="metric"),
            InputDefinition(key="station", default="central", scope=InputScope.TARGET),
        ],
        outputs=[OutputDefinition(key="temp", label="{{city}} Weather")],
    )


class TestBuildContext:
    """Tests for build_context()."""

    def test_precedence(self):
        """Test target inputs override globals, globals override defaults."""
        context = build_context(
            {"city": "Paris", "station": "global"},
            {"station": "north"},
            make_template(),
        )

        assert context == {"city": "Paris", "station": "north", "units": "metric"}

    def test_defaults_fill_absent_keys_only(self):
        """Test an explicit empty value is not replaced by a default."""
        context = build_context({"city": ""}, None, make_template())
        assert context["city"] == ""
        assert context["units"] == "metric"

    def test_fresh_dict_per_call(self):
        """Test contexts are never shared between targets."""
        inputs = {"city": "Oslo"}
        first = build_context(inputs, {"station": "a"}, make_template())
        second = build_context(inputs, {"station": "b"}, make_template())

        first["city"] = "changed"
        assert second["city"] == "Oslo"
        assert inputs == {"city": "Oslo"}


class TestLabelContext:
    """Tests for label_context()."""

    def test_missing_input_uses_default(self):
        """Test a missing input resolves to its declared default."""
        labels = label_context({"temp": "21"}, make_template())
        assert labels["city"] == "NYC"
        assert labels["temp"] == "21"

    def test_does_not_mutate_source(self):
        context = {"temp": "21"}
        label_context(context, make_template())
        assert context == {"temp": "21"}
