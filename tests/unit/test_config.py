"""Unit tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from pg_http.infrastructure.config import Config, DatabaseConfig, ServerConfig, get_config


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default configuration values."""
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("DATA_DIR", raising=False)

        config = Config()

        assert config.port == 3000
        assert config.data_dir == Path("/app/data")
        assert config.store_path == Path("/app/data/pglite_db")
        assert config.server.host == "0.0.0.0"
        assert config.server.max_body_bytes == 10 * 1024 * 1024
        assert config.database.relaxed_durability is True
        assert config.database.lock_file_name == "postmaster.pid"
        assert config.observability.log_format == "json"

    def test_port_and_data_dir_from_unprefixed_env(
        self, monkeypatch: pytest.MonkeyPatch, temp_dir: Path
    ) -> None:
        """PORT and DATA_DIR are read without the PG_HTTP_ prefix."""
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("DATA_DIR", str(temp_dir))

        config = Config()

        assert config.port == 8080
        assert config.store_path == temp_dir / "pglite_db"

    def test_nested_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Nested settings use the prefix and a double underscore."""
        monkeypatch.setenv("PG_HTTP_DATABASE__RELAXED_DURABILITY", "false")
        monkeypatch.setenv("PG_HTTP_OBSERVABILITY__LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.database.relaxed_durability is False
        assert config.observability.log_level == "DEBUG"

    def test_trace_console_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        assert Config().observability.trace_console is False

        monkeypatch.setenv("PG_HTTP_OBSERVABILITY__TRACE_CONSOLE", "true")

        assert Config().observability.trace_console is True

    def test_custom_subdirectory(self, temp_dir: Path) -> None:
        config = Config(data_dir=temp_dir, database=DatabaseConfig(subdirectory="cluster"))

        assert config.store_path == temp_dir / "cluster"

    def test_invalid_port(self) -> None:
        """Test that an out-of-range port raises validation error."""
        with pytest.raises(ValueError):
            Config(port=70000)

    def test_invalid_body_limit(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(max_body_bytes=10)


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        get_config.cache_clear()
        try:
            config1 = get_config()
            config2 = get_config()
            assert config1 is config2
        finally:
            get_config.cache_clear()
