"""
Asyncio SQL adapter for Casbin policy storage.

Same table and semantics as the synchronous adapter, driven through
SQLAlchemy's asyncio extension. Sync driver names are mapped to their async
counterparts (sqlite -> sqlite+aiosqlite, postgresql -> postgresql+asyncpg).
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from casbin_sql_adapter.base import BaseAdapter
from casbin_sql_adapter.codec import (
    iter_model_rules,
    load_policy_row,
    rule_to_params,
    validate_rule,
)
from casbin_sql_adapter.exceptions import DatabaseConnectionError, SchemaError
from casbin_sql_adapter.models.database import create_async_db_engine, create_database

logger = logging.getLogger(__name__)


class AsyncAdapter(BaseAdapter):
    """Async variant of :class:`casbin_sql_adapter.adapter.Adapter`."""

    async def _connect_engine(self, url: str, **kwargs) -> AsyncConnection:
        engine = None
        try:
            engine = create_async_db_engine(url, self.config.timeout, **kwargs)
            return await engine.connect()
        except (SQLAlchemyError, OSError) as e:
            if engine is not None:
                await engine.dispose()
            raise DatabaseConnectionError(f"Cannot connect to {self._safe_url(url)}: {e}") from e

    async def _create_database(self) -> None:
        conn = await self._connect_engine(self._admin_url(), isolation_level="AUTOCOMMIT")
        try:
            await conn.run_sync(create_database, self.config.database_name)
        except SQLAlchemyError as e:
            raise SchemaError(f"Cannot create database {self.config.database_name}: {e}") from e
        finally:
            await self._close(conn)

    async def _open(self) -> AsyncConnection:
        if not self.config.db_specified:
            await self._create_database()

        url = self._database_url()
        conn = await self._connect_engine(url)

        try:
            await conn.run_sync(self.table.create, checkfirst=True)
            await conn.commit()
        except SQLAlchemyError as e:
            await self._close(conn)
            raise SchemaError(f"Cannot create table {self.table.name}: {e}") from e

        logger.debug(f"Opened policy database {self._safe_url(url)}")
        return conn

    async def _close(self, conn: AsyncConnection) -> None:
        try:
            await conn.close()
            await conn.engine.dispose()
        except Exception as e:
            logger.warning(f"Error closing policy database connection: {e}")

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[AsyncConnection]:
        conn = await self._open()
        try:
            yield conn
        finally:
            await self._close(conn)

    def _recreate_table(self, sync_conn) -> None:
        self.table.drop(sync_conn)
        self.table.create(sync_conn)

    async def load_policy(self, model: Any) -> None:
        """Load all policy rules from the database into the model."""
        count = 0
        async with self._connect() as conn:
            result = await conn.execute(self._select_statement())
            for row in result:
                if load_policy_row(row, model):
                    count += 1

        logger.debug(f"Loaded {count} policy rules from table {self.table.name}")

    async def save_policy(self, model: Any) -> bool:
        """Replace the stored policy with the p and g rules of the model."""
        rows = [rule_to_params(ptype, rule) for ptype, rule in iter_model_rules(model)]

        async with self._connect() as conn:
            async with conn.begin():
                try:
                    await conn.run_sync(self._recreate_table)
                except SQLAlchemyError as e:
                    raise SchemaError(f"Cannot recreate table {self.table.name}: {e}") from e

                if rows:
                    await conn.execute(self._insert_statement(), rows)

        logger.info(f"Saved {len(rows)} policy rules to table {self.table.name}")
        return True

    async def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        params = rule_to_params(ptype, rule)

        async with self._connect() as conn:
            async with conn.begin():
                await conn.execute(self._insert_statement(), params)

        return True

    async def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Delete rows of ``ptype`` whose leading fields equal ``rule``."""
        validate_rule(ptype, rule)

        async with self._connect() as conn:
            async with conn.begin():
                result = await conn.execute(self._delete_statement(ptype, rule))
                removed = result.rowcount

        logger.debug(f"Removed {removed} {ptype} rules matching {list(rule)}")
        return True

    async def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *field_values: str) -> bool:
        raise NotImplementedError("not implemented")
