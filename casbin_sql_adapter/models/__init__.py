# Adapter Models
from casbin_sql_adapter.models.database import (
    build_database_url,
    create_async_db_engine,
    create_database,
    create_db_engine,
)
from casbin_sql_adapter.models.policy import (
    FIELD_COLUMNS,
    FIELD_LENGTH,
    MAX_FIELDS,
    PTYPE_LENGTH,
    build_policy_table,
)

__all__ = [
    "build_database_url",
    "create_async_db_engine",
    "create_database",
    "create_db_engine",
    "FIELD_COLUMNS",
    "FIELD_LENGTH",
    "MAX_FIELDS",
    "PTYPE_LENGTH",
    "build_policy_table",
]
