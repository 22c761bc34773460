"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from kv_adapter.infrastructure.config import AdapterConfig, Config, ObservabilityConfig, get_config


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.adapter.persistent is False
        assert config.adapter.schema_prefix == "schema:"
        assert config.adapter.data_prefix == "data:"
        assert config.adapter.attributes_case_sensitive is False
        assert config.adapter.match_falsy_values is False
        assert config.observability.log_format == "json"

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings are read from KV_ADAPTER_<SECTION>__<FIELD>."""
        monkeypatch.setenv("KV_ADAPTER_ADAPTER__PERSISTENT", "true")
        monkeypatch.setenv("KV_ADAPTER_ADAPTER__DATA_PREFIX", "rows_")
        monkeypatch.setenv("KV_ADAPTER_OBSERVABILITY__LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.adapter.persistent is True
        assert config.adapter.data_prefix == "rows_"
        assert config.observability.log_level == "DEBUG"

    def test_prefixes_must_differ(self) -> None:
        """Identical schema and data prefixes would collide."""
        with pytest.raises(ValueError):
            AdapterConfig(schema_prefix="x_", data_prefix="x_")

    def test_empty_prefix_rejected(self) -> None:
        with pytest.raises(ValueError):
            AdapterConfig(schema_prefix="")

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValueError):
            ObservabilityConfig(log_format="xml")  # type: ignore[arg-type]

    def test_ensure_directories_persistent(self, temp_dir: Path) -> None:
        """Persistent mode creates the data file's directory."""
        config = AdapterConfig(persistent=True, db_file_path=temp_dir / "a" / "b" / "kv.db")

        config.ensure_directories()

        assert (temp_dir / "a" / "b").is_dir()
        assert not (temp_dir / "a" / "b" / "kv.db").exists()

    def test_ensure_directories_memory_only(self, temp_dir: Path) -> None:
        """Memory-only mode touches nothing on disk."""
        config = AdapterConfig(persistent=False, db_file_path=temp_dir / "unused" / "kv.db")

        config.ensure_directories()

        assert not (temp_dir / "unused").exists()


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2
