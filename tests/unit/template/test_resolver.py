"""Unit tests for placeholder resolution."""

from litefetch.template import has_placeholders, resolve


class TestResolve:
    """Tests for resolve()."""

    def test_substitutes_keys(self):
        """Test every placeholder is replaced."""
        result = resolve("https://x/{{id}}?c={{currency}}", {"id": "BTC", "currency": "USD"})
        assert result == "https://x/BTC?c=USD"

    def test_whitespace_inside_braces(self):
        """Test {{ key }} resolves like {{key}}."""
        assert resolve("{{ city }} Weather", {"city": "NYC"}) == "NYC Weather"

    def test_missing_key_is_empty(self):
        """Test missing keys resolve to the empty string."""
        assert resolve("a{{missing}}b", {}) == "ab"

    def test_none_and_empty_template(self):
        """Test None and empty templates resolve to empty."""
        assert resolve(None, {"a": "1"}) == ""
        assert resolve("", {"a": "1"}) == ""

    def test_plain_text_passthrough(self):
        """Test text without placeholders is unchanged."""
        assert resolve("no placeholders here", {"a": "1"}) == "no placeholders here"

    def test_single_pass(self):
        """Test substituted values are not scanned again."""
        context = {"a": "{{b}}", "b": "secret"}
        assert resolve("{{a}}", context) == "{{b}}"

    def test_unclosed_placeholder_kept(self):
        """Test an unclosed placeholder is emitted verbatim."""
        assert resolve("price {{open", {"open": "1"}) == "price {{open"


class TestHasPlaceholders:
    """Tests for has_placeholders()."""

    def test_detects_placeholder(self):
        assert has_placeholders("x {{y}}")
        assert has_placeholders("{{ y }}")

    def test_plain_text(self):
        assert not has_placeholders("x {y}")
        assert not has_placeholders("price {{open")
        assert not has_placeholders(None)
