"""
Adapter configuration loader.

Configuration has two parts:
- AdapterConfig: where the policy table lives (driver, data source, names)
- LoggingConfig: log level for applications embedding the adapter
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from casbin_sql_adapter.exceptions import ConfigurationError


DEFAULT_DATABASE_NAME = "casbin"
DEFAULT_TABLE_NAME = "policy"


@dataclass
class AdapterConfig:
    driver_name: str = ""
    data_source_name: str = ""
    db_specified: bool = False
    database_name: str = DEFAULT_DATABASE_NAME
    table_name: str = DEFAULT_TABLE_NAME
    timeout: Optional[float] = None  # seconds, passed to the DBAPI connect call


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class Config:
    """Static configuration loaded from a YAML file."""
    adapter: AdapterConfig = field(default_factory=AdapterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def validate_adapter_config(config: AdapterConfig) -> AdapterConfig:
    """Check construction arguments, raising ConfigurationError on the first bad one."""
    if not isinstance(config.driver_name, str) or not config.driver_name:
        raise ConfigurationError("invalid parameter: driver_name")
    if not isinstance(config.data_source_name, str):
        raise ConfigurationError("invalid parameter: data_source_name")
    # A single bool only; lists or tuples of flags are rejected
    if not isinstance(config.db_specified, bool):
        raise ConfigurationError("invalid parameter: db_specified")
    if not isinstance(config.database_name, str) or not config.database_name:
        raise ConfigurationError("invalid parameter: database_name")
    if not isinstance(config.table_name, str) or not config.table_name:
        raise ConfigurationError("invalid parameter: table_name")
    if config.timeout is not None:
        if isinstance(config.timeout, bool) or not isinstance(config.timeout, (int, float)):
            raise ConfigurationError("invalid parameter: timeout")
        if config.timeout <= 0:
            raise ConfigurationError("invalid parameter: timeout")
    return config


def load_config(config_path: str | Path) -> Config:
    """Load configuration from a YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    config = Config()

    # Adapter
    if "adapter" in data:
        adapter_data = data["adapter"] or {}
        config.adapter = AdapterConfig(
            driver_name=adapter_data.get("driver_name", ""),
            data_source_name=adapter_data.get("data_source_name", ""),
            db_specified=adapter_data.get("db_specified", False),
            database_name=adapter_data.get("database_name", DEFAULT_DATABASE_NAME),
            table_name=adapter_data.get("table_name", DEFAULT_TABLE_NAME),
            timeout=adapter_data.get("timeout"),
        )
        validate_adapter_config(config.adapter)

    # Logging
    if "logging" in data:
        logging_data = data["logging"] or {}
        config.logging = LoggingConfig(
            level=logging_data.get("level", "INFO"),
        )

    return config


def configure_logging(config: LoggingConfig) -> None:
    """Set up root logging with the project's format."""
    level = getattr(logging, config.level.upper(), None)
    if not isinstance(level, int):
        raise ConfigurationError(f"invalid logging level: {config.level}")

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
