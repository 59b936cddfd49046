"""Tests for DuckDB connection management."""

from __future__ import annotations

import tempfile
from pathlib import Path

from sealedfolio.db.connection import get_connection, init_db, init_memory_db
from sealedfolio.db.schema import ALL_TABLES

EXPECTED_TABLES = {"portfolio_items", "app_settings", "api_cache"}


class TestGetConnection:
    """Tests for database connection factory."""

    def test_in_memory_connection(self):
        conn = get_connection(None)
        assert conn is not None
        conn.execute("SELECT 1").fetchone()
        conn.close()

    def test_file_connection(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "test.duckdb"
            conn = get_connection(db_path)
            conn.execute("CREATE TABLE test_tbl (id INT)")
            conn.execute("INSERT INTO test_tbl VALUES (1)")
            result = conn.execute("SELECT * FROM test_tbl").fetchone()
            assert result == (1,)
            conn.close()

    def test_creates_parent_directories(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "nested" / "deep" / "test.duckdb"
            conn = get_connection(db_path)
            conn.execute("SELECT 1").fetchone()
            conn.close()
            assert db_path.parent.exists()


class TestInitMemoryDb:
    """Tests for in-memory database initialization."""

    def test_creates_all_tables(self):
        conn = init_memory_db()
        tables = conn.execute("SHOW TABLES").fetchall()
        assert {t[0] for t in tables} == EXPECTED_TABLES
        conn.close()

    def test_tables_are_empty(self):
        conn = init_memory_db()
        for table in sorted(EXPECTED_TABLES):
            count = conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()  # noqa: S608
            assert count[0] == 0
        conn.close()

    def test_idempotent_init(self):
        conn = init_memory_db()
        for ddl in ALL_TABLES:
            conn.execute(ddl)
        conn.close()


class TestInitDb:
    """Tests for file-backed initialization."""

    def test_explicit_path(self, tmp_path):
        db_path = tmp_path / "portfolio.duckdb"
        conn = init_db(db_path)
        tables = {t[0] for t in conn.execute("SHOW TABLES").fetchall()}
        conn.close()
        assert db_path.exists()
        assert tables == EXPECTED_TABLES

    def test_default_path_from_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("SEALEDFOLIO_DATA_DIR", str(tmp_path / "data"))
        conn = init_db()
        conn.close()
        assert (tmp_path / "data" / "portfolio.duckdb").exists()

    def test_reopen_keeps_data(self, tmp_path):
        db_path = tmp_path / "portfolio.duckdb"
        conn = init_db(db_path)
        conn.execute("INSERT INTO api_cache VALUES ('1', '{}', 5)")
        conn.close()

        conn = init_db(db_path)
        count = conn.execute("SELECT COUNT(*) FROM api_cache").fetchone()
        conn.close()
        assert count[0] == 1
