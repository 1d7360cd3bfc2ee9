# Casbin SQL Adapter
from casbin_sql_adapter.adapter import Adapter
from casbin_sql_adapter.async_adapter import AsyncAdapter
from casbin_sql_adapter.codec import load_policy_line
from casbin_sql_adapter.config import AdapterConfig, Config, load_config
from casbin_sql_adapter.exceptions import (
    AdapterError,
    ConfigurationError,
    DatabaseConnectionError,
    PolicyValidationError,
    SchemaError,
)

__all__ = [
    "Adapter",
    "AsyncAdapter",
    "load_policy_line",
    "AdapterConfig",
    "Config",
    "load_config",
    "AdapterError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "PolicyValidationError",
    "SchemaError",
]
