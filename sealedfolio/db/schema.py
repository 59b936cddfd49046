"""DuckDB schema definitions for SealedFolio.

Three independent stores, each saved as a whole:
- portfolio_items: the ordered item collection (one JSON payload per lot)
- app_settings: display/session settings (single JSON row)
- api_cache: fetched catalog records keyed by catalog id

Payloads are JSON text so that fields added later round-trip without
schema changes. Keys are unique per store because every save rewrites
the whole table.

"""

from __future__ import annotations

# ── Portfolio Items ──

CREATE_PORTFOLIO_ITEMS = """
CREATE TABLE IF NOT EXISTS portfolio_items (
    position     INTEGER NOT NULL,
    id           VARCHAR NOT NULL,
    payload      VARCHAR NOT NULL
);
"""

# ── Settings ──

CREATE_APP_SETTINGS = """
CREATE TABLE IF NOT EXISTS app_settings (
    key          VARCHAR NOT NULL,
    payload      VARCHAR NOT NULL,
    updated_at   TIMESTAMP DEFAULT current_timestamp
);
"""

# ── Catalog Cache ──

CREATE_API_CACHE = """
CREATE TABLE IF NOT EXISTS api_cache (
    api_id       VARCHAR NOT NULL,
    payload      VARCHAR NOT NULL,
    fetched_at   BIGINT NOT NULL
);
"""

# All DDL statements in creation order
ALL_TABLES: list[str] = [
    CREATE_PORTFOLIO_ITEMS,
    CREATE_APP_SETTINGS,
    CREATE_API_CACHE,
]
