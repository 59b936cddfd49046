"""DuckDB connection management for SealedFolio.

Handles database initialization, schema creation, and connection
lifecycle. The database file lives in the data directory::

    ~/.sealedfolio/
      data/
        portfolio.duckdb

"""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

from sealedfolio.config import get_db_path
from sealedfolio.db.schema import ALL_TABLES

logger = logging.getLogger(__name__)


def get_connection(
    db_path: str | Path | None = None,
) -> duckdb.DuckDBPyConnection:
    """Open a DuckDB connection.

    Args:
        db_path: Path to the .duckdb file. If None, uses in-memory database.

    Returns:
        Active DuckDB connection.

    """
    if db_path is None:
        return duckdb.connect(":memory:")

    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path))


def _create_schema(conn: duckdb.DuckDBPyConnection) -> None:
    for ddl in ALL_TABLES:
        conn.execute(ddl)


def init_db(
    db_path: str | Path | None = None,
) -> duckdb.DuckDBPyConnection:
    """Initialize the portfolio database with schema.

    Creates tables: portfolio_items, app_settings, api_cache.

    Args:
        db_path: Path to the .duckdb file. Defaults to
            ``$SEALEDFOLIO_DATA_DIR/portfolio.duckdb``.

    Returns:
        Initialized DuckDB connection.

    """
    if db_path is None:
        db_path = get_db_path()

    conn = get_connection(db_path)
    _create_schema(conn)
    logger.info("Portfolio database initialized at %s", db_path)
    return conn


def init_memory_db() -> duckdb.DuckDBPyConnection:
    """Create an in-memory database with full schema.

    Useful for testing and ephemeral operations.

    Returns:
        In-memory DuckDB connection with all tables created.

    """
    conn = get_connection(None)
    _create_schema(conn)
    return conn
