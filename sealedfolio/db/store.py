"""Persisted stores: DuckDB load/save for items, settings and cache.

Every save replaces the whole store inside one transaction, so a store
is always either the old blob or the new one. Loads never raise:
unreadable tables or malformed payloads are logged and fall back to an
empty collection or default settings; single bad rows are skipped.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import duckdb

from sealedfolio.models import CacheEntry, PortfolioItem, Settings

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

_SETTINGS_KEY = "settings"


def _replace_all(
    conn: duckdb.DuckDBPyConnection,
    table: str,
    insert_sql: str,
    rows: list[list[Any]],
) -> None:
    """Swap the full contents of ``table`` for ``rows`` atomically."""
    conn.begin()
    try:
        conn.execute(f"DELETE FROM {table}")  # noqa: S608
        if rows:
            conn.executemany(insert_sql, rows)
    except Exception:
        conn.rollback()
        raise
    conn.commit()


# ── Items ──


def save_items(
    conn: duckdb.DuckDBPyConnection,
    items: Iterable[PortfolioItem],
) -> int:
    """Persist the ordered item collection, replacing what was stored.

    Args:
        conn: Active DuckDB connection.
        items: Items in display order.

    Returns:
        Number of items written.

    """
    rows = [
        [position, item.id, json.dumps(item.to_dict())]
        for position, item in enumerate(items)
    ]
    _replace_all(
        conn,
        "portfolio_items",
        "INSERT INTO portfolio_items (position, id, payload) VALUES (?, ?, ?)",
        rows,
    )
    logger.info("Saved %d portfolio items", len(rows))
    return len(rows)


def load_items(conn: duckdb.DuckDBPyConnection) -> list[PortfolioItem]:
    """Load the item collection in stored order; [] if unreadable."""
    try:
        result = conn.execute(
            "SELECT id, payload FROM portfolio_items ORDER BY position"
        ).fetchall()
    except duckdb.Error:
        logger.warning("Could not read portfolio items, starting empty", exc_info=True)
        return []

    items: list[PortfolioItem] = []
    for item_id, payload in result:
        try:
            items.append(PortfolioItem.from_dict(json.loads(payload)))
        except ValueError:
            logger.warning("Skipping malformed stored item %s", item_id)
    return items


# ── Settings ──


def save_settings(conn: duckdb.DuckDBPyConnection, settings: Settings) -> None:
    """Persist settings as a single JSON row."""
    _replace_all(
        conn,
        "app_settings",
        "INSERT INTO app_settings (key, payload) VALUES (?, ?)",
        [[_SETTINGS_KEY, json.dumps(settings.to_dict())]],
    )


def load_settings(conn: duckdb.DuckDBPyConnection) -> Settings:
    """Load settings; defaults when absent or unreadable."""
    try:
        row = conn.execute(
            "SELECT payload FROM app_settings WHERE key = ?", [_SETTINGS_KEY]
        ).fetchone()
        data = json.loads(row[0]) if row else {}
    except (duckdb.Error, ValueError):
        logger.warning("Could not read settings, using defaults", exc_info=True)
        return Settings()
    return Settings.from_dict(data)


# ── Cache ──


def save_cache(
    conn: duckdb.DuckDBPyConnection,
    entries: Mapping[str, CacheEntry],
) -> int:
    """Persist all cache entries, replacing what was stored.

    Returns:
        Number of entries written.

    """
    rows = [
        [key, json.dumps(entry.data), entry.fetched_at]
        for key, entry in entries.items()
    ]
    _replace_all(
        conn,
        "api_cache",
        "INSERT INTO api_cache (api_id, payload, fetched_at) VALUES (?, ?, ?)",
        rows,
    )
    logger.debug("Saved %d cache entries", len(rows))
    return len(rows)


def load_cache(conn: duckdb.DuckDBPyConnection) -> dict[str, CacheEntry]:
    """Load cache entries keyed by catalog id; {} if unreadable."""
    try:
        result = conn.execute(
            "SELECT api_id, payload, fetched_at FROM api_cache"
        ).fetchall()
    except duckdb.Error:
        logger.warning("Could not read catalog cache, starting empty", exc_info=True)
        return {}

    entries: dict[str, CacheEntry] = {}
    for api_id, payload, fetched_at in result:
        try:
            entries[str(api_id)] = CacheEntry.from_dict(
                {"data": json.loads(payload), "fetchedAt": fetched_at}
            )
        except ValueError:
            logger.warning("Skipping malformed cache entry %s", api_id)
    return entries
