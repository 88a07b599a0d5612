"""Unit tests for the transform pipeline and functions."""

from datetime import datetime

import pytest

from litefetch.errors import FetchError
from litefetch.transform import TRANSFORMS, TransformRule, apply_transforms


def run(rules: list[TransformRule], context: dict[str, str] | None = None) -> dict[str, str]:
    context = dict(context or {})
    apply_transforms(rules, context)
    return context


class TestApplyTransforms:
    """Tests for apply_transforms()."""

    def test_rules_run_in_order(self):
        """Test each rule sees the previous rule's write."""
        context = run(
            [
                TransformRule(var="price", function="number", args={"multiply": 2}),
                TransformRule(var="state", function="threshold", source="price",
                              args={"warn": 10, "crit": 20}),
            ],
            {"price": "7.5"},
        )
        assert context == {"price": "15.00", "state": "1"}

    def test_source_template(self):
        """Test a source containing placeholders is resolved."""
        context = run(
            [TransformRule(var="pair", function="upper", source="{{base}}/{{quote}}")],
            {"base": "btc", "quote": "usdt"},
        )
        assert context["pair"] == "BTC/USDT"

    def test_unbalanced_braces_name_a_key(self):
        """Test a source without a complete placeholder is a context key."""
        context = run([TransformRule(var="out", function="upper", source="{{odd")], {"{{odd": "v"})
        assert context["out"] == "V"

    def test_function_name_case_insensitive(self):
        assert run([TransformRule(var="a", function=" Trim ")], {"a": " x "})["a"] == "x"

    def test_empty_rules(self):
        context = {"a": "1"}
        apply_transforms(None, context)
        apply_transforms([], context)
        assert context == {"a": "1"}

    def test_unknown_function(self):
        """Test unknown functions raise TRANSFORM_FAILED."""
        with pytest.raises(FetchError) as exc_info:
            run([TransformRule(var="a", function="explode")])
        assert exc_info.value.code == "TRANSFORM_FAILED"
        assert "explode" in str(exc_info.value)

    def test_bad_arguments(self):
        """Test argument errors become TRANSFORM_FAILED."""
        with pytest.raises(FetchError) as exc_info:
            run([TransformRule(var="a", function="number", args={"divide": 0})], {"a": "1"})
        assert exc_info.value.code == "TRANSFORM_FAILED"

    def test_custom_registry(self):
        registry = {"double": lambda value, args, context: value * 2}
        context = {"a": "ab"}
        apply_transforms([TransformRule(var="a", function="double")], context, registry)
        assert context["a"] == "abab"


class TestFunctions:
    """Tests for individual transform functions."""

    def test_set_resolves_value(self):
        context = run([TransformRule(var="url", function="set",
                                     args={"value": "https://x/{{id}}"})], {"id": "7"})
        assert context["url"] == "https://x/7"

    def test_map_with_default(self):
        rule = TransformRule(var="s", function="map",
                             args={"map": {"0": "ok", "1": "down"}, "default": "?"})
        assert run([rule], {"s": "1"})["s"] == "down"
        assert run([rule], {"s": "9"})["s"] == "?"

    def test_map_without_default_keeps_value(self):
        rule = TransformRule(var="s", function="map", args={"map": {"0": "ok"}})
        assert run([rule], {"s": "9"})["s"] == "9"

    @pytest.mark.parametrize(
        "value, args, expected",
        [
            ("1,234.5", {}, "1234.50"),
            ("1024", {"divide": 1024, "decimals": 0}, "1"),
            ("0.5", {"multiply": 100, "add": 1, "decimals": 1}, "51.0"),
            ("n/a", {"default": "-"}, "-"),
        ],
    )
    def test_number(self, value, args, expected):
        assert TRANSFORMS["number"](value, args, {}) == expected

    @pytest.mark.parametrize(
        "value, args, expected",
        [
            ("5", {"warn": 10, "crit": 20}, "0"),
            ("10", {"warn": 10, "crit": 20}, "1"),
            ("25", {"warn": 10, "crit": 20}, "2"),
            ("5", {"warn": 20, "crit": 10, "reverse": "true"}, "2"),
            ("15", {"warn": 20, "crit": 10, "reverse": True}, "1"),
            ("abc", {"warn": 1}, "0"),
        ],
    )
    def test_threshold(self, value, args, expected):
        assert TRANSFORMS["threshold"](value, args, {}) == expected

    def test_threshold_bounds_from_context(self):
        assert TRANSFORMS["threshold"]("8", {"warn": "{{limit}}"}, {"limit": "5"}) == "1"

    def test_replace(self):
        assert TRANSFORMS["replace"]("a-b-c", {"old": "-", "new": "/"}, {}) == "a/b/c"
        assert TRANSFORMS["replace"]("abc", {}, {}) == "abc"

    def test_regex(self):
        assert TRANSFORMS["regex"]("v1.2.3", {"pattern": r"v(\d+)"}, {}) == "1"
        assert TRANSFORMS["regex"]("v1.2.3", {"pattern": r"\d\.\d"}, {}) == "1.2"
        assert TRANSFORMS["regex"]("none", {"pattern": r"\d", "default": "x"}, {}) == "x"

    def test_invalid_regex_fails(self):
        with pytest.raises(FetchError):
            run([TransformRule(var="a", function="regex", args={"pattern": "("})], {"a": "x"})

    def test_case_and_trim(self):
        assert TRANSFORMS["upper"]("ab", {}, {}) == "AB"
        assert TRANSFORMS["lower"]("AB", {}, {}) == "ab"
        assert TRANSFORMS["trim"]("  ab ", {}, {}) == "ab"

    def test_timestamp_seconds_and_millis(self):
        """Test millisecond timestamps are detected."""
        seconds = 1_700_000_000
        expected = datetime.fromtimestamp(seconds).strftime("%Y-%m-%d %H:%M")
        args = {"format": "%Y-%m-%d %H:%M"}

        assert TRANSFORMS["timestamp"](str(seconds), args, {}) == expected
        assert TRANSFORMS["timestamp"](str(seconds * 1000), args, {}) == expected
        assert TRANSFORMS["timestamp"]("soon", {"default": "-"}, {}) == "-"
