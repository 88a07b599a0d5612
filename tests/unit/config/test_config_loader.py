"""Unit tests for configuration loading."""

import pytest

from litefetch.config import ConfigLoader, EngineConfig, load_config, resolve_env_vars
from litefetch.errors import FetchError
from litefetch.types import LogFormat, LogLevel

CONFIG_YAML = """
http:
  timeout_seconds: 5
  user_agent: "${LITEFETCH_TEST_AGENT:-probe/2}"
  verify_tls: true
cache:
  max_entries: 50
  evict_fraction: 0.5
execution:
  target_stagger_ms: 10
logging:
  level: debug
  format: json
  components:
    cache: false
telemetry:
  enabled: false
"""


class TestResolveEnvVars:
    """Tests for resolve_env_vars()."""

    def test_set_variable(self, monkeypatch):
        monkeypatch.setenv("LF_TOKEN", "abc")
        assert resolve_env_vars("Bearer ${LF_TOKEN}") == "Bearer abc"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("LF_MISSING", raising=False)
        assert resolve_env_vars("${LF_MISSING:-fallback}") == "fallback"

    def test_required_missing(self, monkeypatch):
        monkeypatch.delenv("LF_MISSING", raising=False)
        with pytest.raises(FetchError) as exc_info:
            resolve_env_vars("${LF_MISSING}")
        assert exc_info.value.code == "CONFIG_INVALID"

    def test_custom_message(self, monkeypatch):
        monkeypatch.delenv("LF_MISSING", raising=False)
        with pytest.raises(FetchError, match="set the proxy"):
            resolve_env_vars("${LF_MISSING:?set the proxy}")


class TestConfigLoader:
    """Tests for ConfigLoader.load()."""

    def test_load_file(self, tmp_path, monkeypatch):
        """Test sections, enums and numeric coercion."""
        monkeypatch.delenv("LITEFETCH_TEST_AGENT", raising=False)
        config_file = tmp_path / "litefetch.yaml"
        config_file.write_text(CONFIG_YAML)

        config = ConfigLoader().load(config_file)

        assert config.http.timeout_seconds == 5.0
        assert isinstance(config.http.timeout_seconds, float)
        assert config.http.user_agent == "probe/2"
        assert config.http.verify_tls is True
        assert config.cache.max_entries == 50
        assert config.cache.max_body_bytes == 500 * 1024
        assert config.execution.target_stagger_ms == 10
        assert config.logging.level == LogLevel.DEBUG
        assert config.logging.format == LogFormat.JSON
        assert config.logging.components.cache is False
        assert config.logging.components.http is True
        assert config.telemetry.enabled is False

    def test_logging_to_log_config(self, tmp_path):
        config_file = tmp_path / "litefetch.yaml"
        config_file.write_text(CONFIG_YAML)

        log_config = load_config(config_file).logging.to_log_config()

        assert log_config.level == LogLevel.DEBUG
        assert log_config.components["cache"] is False

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigLoader().load(tmp_path / "absent.yaml")
        assert config == EngineConfig()

    def test_missing_file_without_defaults(self, tmp_path):
        with pytest.raises(FetchError, match="not found"):
            ConfigLoader().load(tmp_path / "absent.yaml", use_defaults=False)

    def test_env_path(self, tmp_path, monkeypatch):
        """Test LITEFETCH_CONFIG_PATH is used when no path is given."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("cache:\n  max_entries: 7\n")
        monkeypatch.setenv("LITEFETCH_CONFIG_PATH", str(config_file))

        assert ConfigLoader().load().cache.max_entries == 7

    def test_local_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("LITEFETCH_CONFIG_PATH", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "litefetch.yaml").write_text("execution:\n  target_stagger_ms: 0\n")

        assert ConfigLoader().load().execution.target_stagger_ms == 0

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("cache: [unclosed")
        with pytest.raises(FetchError) as exc_info:
            ConfigLoader().load(config_file)
        assert exc_info.value.code == "CONFIG_INVALID"

    @pytest.mark.parametrize(
        "data, path",
        [
            ({"http": {"timeout_seconds": 0}}, "http.timeout_seconds"),
            ({"cache": {"max_entries": -1}}, "cache.max_entries"),
            ({"cache": {"max_body_bytes": "big"}}, "cache.max_body_bytes"),
            ({"cache": {"evict_fraction": 1.5}}, "cache.evict_fraction"),
            ({"execution": {"target_stagger_ms": -5}}, "execution.target_stagger_ms"),
            ({"http": "fast"}, "http"),
        ],
    )
    def test_invalid_values(self, data, path):
        """Test validation errors name the offending key."""
        with pytest.raises(FetchError) as exc_info:
            ConfigLoader().load_from_dict(data)
        assert path in str(exc_info.value)

    def test_unknown_key_is_warning(self):
        result = ConfigLoader().validate({"server": {"port": 1}})
        assert result.valid
        assert result.warnings[0].path == "server"


class TestReload:
    """Tests for reload() and change callbacks."""

    def test_reload_notifies(self, tmp_path):
        config_file = tmp_path / "litefetch.yaml"
        config_file.write_text("cache:\n  max_entries: 10\n")
        loader = ConfigLoader()
        loader.load(config_file)
        seen: list[EngineConfig] = []
        loader.on_change(seen.append)

        config_file.write_text("cache:\n  max_entries: 20\n")
        config = loader.reload()

        assert config.cache.max_entries == 20
        assert loader.get() is config
        assert seen == [config]

    def test_reload_without_file(self):
        loader = ConfigLoader()
        loader.load_defaults()
        with pytest.raises(FetchError, match="cannot reload"):
            loader.reload()

    def test_get_before_load(self):
        with pytest.raises(FetchError, match="not loaded"):
            ConfigLoader().get()
