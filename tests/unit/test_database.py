"""
Tests for database URL and engine helpers.
"""

import os
import tempfile

from casbin_sql_adapter.config import AdapterConfig
from casbin_sql_adapter.models.database import (
    _connect_args,
    _ensure_sqlite_parent_dir,
    build_database_url,
    get_async_database_url,
    get_database_url,
)


class TestBuildDatabaseUrl:
    """Tests for build_database_url."""

    def test_appends_database_name(self):
        config = AdapterConfig(driver_name="mysql+pymysql", data_source_name="root@localhost:3306/")

        assert build_database_url(config) == "mysql+pymysql://root@localhost:3306/casbin"
        assert build_database_url(config, with_database=False) == "mysql+pymysql://root@localhost:3306/"

    def test_custom_database_name(self):
        config = AdapterConfig(
            driver_name="postgresql",
            data_source_name="user@localhost/",
            database_name="authz",
        )
        assert build_database_url(config) == "postgresql://user@localhost/authz"

    def test_db_specified(self):
        config = AdapterConfig(
            driver_name="postgresql",
            data_source_name="user@localhost/rules",
            db_specified=True,
        )
        assert build_database_url(config) == "postgresql://user@localhost/rules"
        assert build_database_url(config, with_database=False) == "postgresql://user@localhost/rules"


class TestUrlConversion:
    """Tests for sync/async URL conversion."""

    def test_sync_url(self):
        assert get_database_url("sqlite+aiosqlite:///./policy.db") == "sqlite:///./policy.db"
        assert get_database_url("postgresql+asyncpg://u@h/db") == "postgresql://u@h/db"
        assert get_database_url("mysql+pymysql://u@h/db") == "mysql+pymysql://u@h/db"

    def test_async_url(self):
        assert get_async_database_url("sqlite:///./policy.db") == "sqlite+aiosqlite:///./policy.db"
        assert get_async_database_url("postgresql://u@h/db") == "postgresql+asyncpg://u@h/db"
        assert get_async_database_url("sqlite+aiosqlite://") == "sqlite+aiosqlite://"


class TestConnectArgs:
    """Tests for timeout mapping."""

    def test_no_timeout(self):
        assert _connect_args("sqlite://", None) == {}

    def test_sqlite(self):
        assert _connect_args("sqlite:///./policy.db", 2.5) == {"timeout": 2.5}

    def test_asyncpg(self):
        assert _connect_args("postgresql+asyncpg://u@h/db", 3) == {"timeout": 3}

    def test_connect_timeout(self):
        assert _connect_args("postgresql://u@h/db", 5) == {"connect_timeout": 5}
        assert _connect_args("mysql+pymysql://u@h/db", 0.5) == {"connect_timeout": 1}


class TestEnsureSqliteParentDir:
    """Tests for _ensure_sqlite_parent_dir."""

    def test_absolute_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = os.path.join(tmpdir, "a", "b", "policy.db")
            _ensure_sqlite_parent_dir(f"sqlite+aiosqlite:///{db_path}")

            assert os.path.isdir(os.path.join(tmpdir, "a", "b"))

    def test_memory(self):
        _ensure_sqlite_parent_dir("sqlite+aiosqlite://")
        _ensure_sqlite_parent_dir("sqlite+aiosqlite:///:memory:")
