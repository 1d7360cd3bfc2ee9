"""
Tests for configuration loader.
"""

import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from casbin_sql_adapter.config import (
    AdapterConfig,
    Config,
    LoggingConfig,
    configure_logging,
    load_config,
    validate_adapter_config,
)
from casbin_sql_adapter.exceptions import ConfigurationError


def write_config(content: str) -> str:
    with tempfile.NamedTemporaryFile(
        mode="w", suffix=".yaml", delete=False, encoding="utf-8"
    ) as f:
        f.write(content)
        return f.name


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_minimal_config(self):
        """Test loading a minimal config file."""
        path = write_config("""
adapter:
  driver_name: "sqlite"
  data_source_name: "/./policy.db"
""")
        try:
            config = load_config(path)

            assert config.adapter.driver_name == "sqlite"
            assert config.adapter.data_source_name == "/./policy.db"
            assert config.adapter.db_specified is False  # default
            assert config.adapter.database_name == "casbin"
            assert config.adapter.table_name == "policy"
            assert config.adapter.timeout is None
            assert config.logging.level == "INFO"
        finally:
            Path(path).unlink()

    def test_load_full_config(self):
        """Test loading a full config file."""
        path = write_config("""
adapter:
  driver_name: "postgresql"
  data_source_name: "user:secret@db:5432/"
  db_specified: false
  database_name: "authz"
  table_name: "casbin_rule"
  timeout: 5

logging:
  level: "DEBUG"
""")
        try:
            config = load_config(path)

            assert config.adapter == AdapterConfig(
                driver_name="postgresql",
                data_source_name="user:secret@db:5432/",
                db_specified=False,
                database_name="authz",
                table_name="casbin_rule",
                timeout=5,
            )
            assert config.logging.level == "DEBUG"
        finally:
            Path(path).unlink()

    def test_empty_file(self):
        path = write_config("")
        try:
            config = load_config(path)
            assert config == Config()
        finally:
            Path(path).unlink()

    def test_config_file_not_found(self):
        """Test that FileNotFoundError is raised for missing config."""
        with pytest.raises(FileNotFoundError):
            load_config("/nonexistent/path/config.yaml")

    def test_invalid_flag_in_file(self):
        path = write_config("""
adapter:
  driver_name: "sqlite"
  data_source_name: "/./policy.db"
  db_specified: [true, false]
""")
        try:
            with pytest.raises(ConfigurationError):
                load_config(path)
        finally:
            Path(path).unlink()


class TestValidateAdapterConfig:
    """Tests for validate_adapter_config."""

    def test_valid(self):
        config = AdapterConfig(driver_name="sqlite", data_source_name="/policy.db", timeout=2.5)
        assert validate_adapter_config(config) is config

    @pytest.mark.parametrize(
        "overrides",
        [
            {"driver_name": ""},
            {"data_source_name": None},
            {"db_specified": "yes"},
            {"db_specified": [True]},
            {"database_name": ""},
            {"table_name": ""},
            {"timeout": 0},
            {"timeout": -1},
            {"timeout": True},
            {"timeout": "5"},
        ],
    )
    def test_invalid(self, overrides):
        values = {"driver_name": "sqlite", "data_source_name": "/policy.db"}
        values.update(overrides)

        with pytest.raises(ConfigurationError):
            validate_adapter_config(AdapterConfig(**values))


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_level(self):
        with patch("logging.basicConfig") as mock_basic:
            configure_logging(LoggingConfig(level="debug"))

            mock_basic.assert_called_once()
            assert mock_basic.call_args.kwargs["level"] == logging.DEBUG

    def test_invalid_level(self):
        with pytest.raises(ConfigurationError):
            configure_logging(LoggingConfig(level="LOUD"))
