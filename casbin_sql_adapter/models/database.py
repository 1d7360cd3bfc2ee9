"""
Database URLs, engines and database-level DDL.
"""

from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from casbin_sql_adapter.config import AdapterConfig


def build_database_url(config: AdapterConfig, with_database: bool = True) -> str:
    """Join driver name and data source into a SQLAlchemy URL.

    When the data source does not already name a database, the configured
    database name is appended to it, e.g.
    ``mysql+pymysql`` + ``root:pw@localhost:3306/`` -> ``mysql+pymysql://root:pw@localhost:3306/casbin``
    """
    data_source = config.data_source_name
    if with_database and not config.db_specified:
        data_source = data_source + config.database_name
    return f"{config.driver_name}://{data_source}"


def get_database_url(url: str) -> str:
    """Get the synchronous database URL.

    Converts async URLs to sync URLs if needed.
    e.g., sqlite+aiosqlite:// -> sqlite://
          postgresql+asyncpg:// -> postgresql://
    """
    if "+aiosqlite" in url:
        return url.replace("+aiosqlite", "")
    elif "+asyncpg" in url:
        return url.replace("+asyncpg", "")

    return url


def get_async_database_url(url: str) -> str:
    """Get the async database URL.

    Converts sync URLs to async URLs if needed.
    e.g., sqlite:// -> sqlite+aiosqlite://
          postgresql:// -> postgresql+asyncpg://
    """
    # Already async
    if "+aiosqlite" in url or "+asyncpg" in url:
        return url

    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    elif url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return url


def _ensure_sqlite_parent_dir(url: str) -> None:
    """Ensure parent directory exists for SQLite database."""
    if url.startswith("sqlite"):
        # Format: sqlite+aiosqlite:///./data/policy.db or sqlite:////abs/policy.db
        parsed = urlparse(url)
        if parsed.path:
            path = parsed.path[1:]
            if path and path != ":memory:":
                db_path = Path(path)
                db_path.parent.mkdir(parents=True, exist_ok=True)


def _connect_args(url: str, timeout: Optional[float]) -> dict[str, Any]:
    """Map the adapter timeout onto the DBAPI connect argument name."""
    if timeout is None:
        return {}
    if url.startswith("sqlite"):
        return {"timeout": timeout}
    if "+asyncpg" in url:
        return {"timeout": timeout}
    # psycopg2, pymysql and mysqlclient take whole seconds
    return {"connect_timeout": max(1, int(timeout))}


def _enable_sqlite_transactions(engine) -> None:
    """Have SQLAlchemy emit BEGIN itself on SQLite.

    The sqlite3 driver only opens a transaction before DML, so DROP and
    CREATE TABLE would otherwise commit immediately.
    """

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str, timeout: Optional[float] = None, **kwargs):
    """Create a synchronous database engine."""
    url = get_database_url(url)
    engine = create_engine(url, echo=False, connect_args=_connect_args(url, timeout), **kwargs)
    # AUTOCOMMIT engines must not open transactions
    if url.startswith("sqlite") and "isolation_level" not in kwargs:
        _enable_sqlite_transactions(engine)
    return engine


def create_async_db_engine(url: str, timeout: Optional[float] = None, **kwargs):
    """Create an async database engine."""
    url = get_async_database_url(url)
    _ensure_sqlite_parent_dir(url)
    engine = create_async_engine(url, echo=False, connect_args=_connect_args(url, timeout), **kwargs)
    if url.startswith("sqlite") and "isolation_level" not in kwargs:
        _enable_sqlite_transactions(engine.sync_engine)
    return engine


def create_database(conn: Connection, database_name: str) -> None:
    """Create the named database unless it already exists.

    Must run on a connection in AUTOCOMMIT isolation. PostgreSQL has no
    ``CREATE DATABASE IF NOT EXISTS``, so the catalog is checked first there.
    """
    quoted = conn.dialect.identifier_preparer.quote(database_name)

    if conn.dialect.name == "postgresql":
        exists = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :name"),
            {"name": database_name},
        ).first()
        if exists is None:
            conn.execute(text(f"CREATE DATABASE {quoted}"))
        return

    conn.execute(text(f"CREATE DATABASE IF NOT EXISTS {quoted}"))
