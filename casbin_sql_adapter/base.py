"""
Configuration and statement building shared by the sync and async adapters.
"""

from typing import Optional, Sequence

from sqlalchemy import Delete, Insert, Select, delete, insert, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from casbin_sql_adapter.config import (
    DEFAULT_DATABASE_NAME,
    DEFAULT_TABLE_NAME,
    AdapterConfig,
    validate_adapter_config,
)
from casbin_sql_adapter.exceptions import ConfigurationError
from casbin_sql_adapter.models.database import build_database_url
from casbin_sql_adapter.models.policy import FIELD_COLUMNS, build_policy_table


class BaseAdapter:
    """Holds adapter configuration and the policy table definition.

    Subclasses open a fresh connection per operation; nothing else is kept
    between calls.

    ``db_specified`` takes exactly one bool. Any other value, including a
    tuple or list of flags, raises ConfigurationError. The remaining options
    are keyword-only, so a second positional flag is a TypeError.
    """

    def __init__(
        self,
        driver_name: str,
        data_source_name: str,
        db_specified: bool = False,
        *,
        database_name: str = DEFAULT_DATABASE_NAME,
        table_name: str = DEFAULT_TABLE_NAME,
        timeout: Optional[float] = None,
    ):
        self.config = validate_adapter_config(
            AdapterConfig(
                driver_name=driver_name,
                data_source_name=data_source_name,
                db_specified=db_specified,
                database_name=database_name,
                table_name=table_name,
                timeout=timeout,
            )
        )

        for url in (self._database_url(), self._admin_url()):
            try:
                make_url(url)
            except ArgumentError as e:
                raise ConfigurationError(f"invalid database url for driver {driver_name!r}: {e}") from e

        self.table = build_policy_table(self.config.table_name)

    @classmethod
    def from_config(cls, config: AdapterConfig):
        """Create an adapter from an AdapterConfig."""
        return cls(
            config.driver_name,
            config.data_source_name,
            config.db_specified,
            database_name=config.database_name,
            table_name=config.table_name,
            timeout=config.timeout,
        )

    def _database_url(self) -> str:
        return build_database_url(self.config, with_database=True)

    def _admin_url(self) -> str:
        return build_database_url(self.config, with_database=False)

    @staticmethod
    def _safe_url(url: str) -> str:
        """Render a URL for log and error messages without its password."""
        return make_url(url).render_as_string(hide_password=True)

    def _select_statement(self) -> Select:
        return select(self.table)

    def _insert_statement(self) -> Insert:
        return insert(self.table)

    def _delete_statement(self, ptype: str, rule: Sequence[str]) -> Delete:
        """DELETE ... WHERE ptype = ? AND v0 = ? AND ... for each supplied field."""
        conditions = [self.table.c.ptype == ptype]
        for name, value in zip(FIELD_COLUMNS, rule):
            conditions.append(self.table.c[name] == value)
        return delete(self.table).where(*conditions)

    def is_filtered(self) -> bool:
        """The adapter always loads the whole policy."""
        return False
