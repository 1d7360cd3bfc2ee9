"""
Synchronous SQL adapter for Casbin policy storage.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from casbin_sql_adapter.base import BaseAdapter
from casbin_sql_adapter.codec import (
    iter_model_rules,
    load_policy_row,
    rule_to_params,
    validate_rule,
)
from casbin_sql_adapter.exceptions import DatabaseConnectionError, SchemaError
from casbin_sql_adapter.models.database import create_database, create_db_engine

logger = logging.getLogger(__name__)


class Adapter(BaseAdapter):
    """Stores policy rules in a single SQL table.

    Every operation opens its own connection, creating the database (unless
    ``db_specified``) and the policy table as needed, and closes it before
    returning.
    """

    def _connect_engine(self, url: str, **kwargs) -> Connection:
        """Create an engine for ``url`` and check out a connection from it."""
        engine = None
        try:
            engine = create_db_engine(url, self.config.timeout, **kwargs)
            return engine.connect()
        except (SQLAlchemyError, OSError) as e:
            if engine is not None:
                engine.dispose()
            raise DatabaseConnectionError(f"Cannot connect to {self._safe_url(url)}: {e}") from e

    def _create_database(self) -> None:
        """Create the policy database through the data source as given."""
        conn = self._connect_engine(self._admin_url(), isolation_level="AUTOCOMMIT")
        try:
            create_database(conn, self.config.database_name)
        except SQLAlchemyError as e:
            raise SchemaError(f"Cannot create database {self.config.database_name}: {e}") from e
        finally:
            self._close(conn)

    def _open(self) -> Connection:
        if not self.config.db_specified:
            self._create_database()

        url = self._database_url()
        conn = self._connect_engine(url)

        try:
            self.table.create(conn, checkfirst=True)
            conn.commit()
        except SQLAlchemyError as e:
            self._close(conn)
            raise SchemaError(f"Cannot create table {self.table.name}: {e}") from e

        logger.debug(f"Opened policy database {self._safe_url(url)}")
        return conn

    def _close(self, conn: Connection) -> None:
        try:
            conn.close()
            conn.engine.dispose()
        except Exception as e:
            logger.warning(f"Error closing policy database connection: {e}")

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        conn = self._open()
        try:
            yield conn
        finally:
            self._close(conn)

    def load_policy(self, model: Any) -> None:
        """Load all policy rules from the database into the model.

        Rules loaded before an error stay in the model.
        """
        count = 0
        with self._connect() as conn:
            result = conn.execute(self._select_statement())
            for row in result:
                if load_policy_row(row, model):
                    count += 1

        logger.debug(f"Loaded {count} policy rules from table {self.table.name}")

    def save_policy(self, model: Any) -> bool:
        """Replace the stored policy with the p and g rules of the model."""
        # Validate before the table is dropped so bad input loses nothing
        rows = [rule_to_params(ptype, rule) for ptype, rule in iter_model_rules(model)]

        with self._connect() as conn:
            with conn.begin():
                try:
                    self.table.drop(conn)
                    self.table.create(conn)
                except SQLAlchemyError as e:
                    raise SchemaError(f"Cannot recreate table {self.table.name}: {e}") from e

                if rows:
                    conn.execute(self._insert_statement(), rows)

        logger.info(f"Saved {len(rows)} policy rules to table {self.table.name}")
        return True

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Insert one rule. ``sec`` is unused; all sections share one table."""
        params = rule_to_params(ptype, rule)

        with self._connect() as conn:
            with conn.begin():
                conn.execute(self._insert_statement(), params)

        return True

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Delete rows of ``ptype`` whose leading fields equal ``rule``.

        Columns past the end of ``rule`` are not compared, so a shorter rule
        removes every stored rule it is a prefix of. Matching nothing is not
        an error.
        """
        validate_rule(ptype, rule)

        with self._connect() as conn:
            with conn.begin():
                result = conn.execute(self._delete_statement(ptype, rule))
                removed = result.rowcount

        logger.debug(f"Removed {removed} {ptype} rules matching {list(rule)}")
        return True

    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *field_values: str) -> bool:
        """Not supported."""
        raise NotImplementedError("not implemented")
