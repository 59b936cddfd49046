"""Runtime configuration for SealedFolio.

Values come from environment variables read at call time, falling back
to module-level defaults::

    SEALEDFOLIO_API_BASE       catalog proxy base URL
    SEALEDFOLIO_DATA_DIR       directory holding portfolio.duckdb
    SEALEDFOLIO_HTTP_TIMEOUT   request timeout in seconds
    SEALEDFOLIO_LOG_LEVEL      root log level name

"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Minimum time between bulk price refreshes, also the cache staleness window
COOLDOWN_MS = 30 * 60 * 1000

SUPPORTED_CURRENCIES: tuple[str, ...] = ("EUR", "USD", "GBP", "CHF")
SUPPORTED_THEMES: tuple[str, ...] = ("dark", "light")
SORT_KEYS: tuple[str, ...] = (
    "name",
    "purchaseDate",
    "quantity",
    "pricePaid",
    "marketPrice",
    "invested",
    "marketTotal",
    "pl",
)

# Provenance tag stored on items linked to the catalog
API_SOURCE = "rapidapi:pokemon-tcg"

_DEFAULT_API_BASE = "http://localhost:3000"
_DEFAULT_DATA_DIR = Path.home() / ".sealedfolio" / "data"
_DEFAULT_TIMEOUT = 15.0
_DB_FILENAME = "portfolio.duckdb"


def get_api_base() -> str:
    """Return the catalog proxy base URL without a trailing slash."""
    return os.environ.get("SEALEDFOLIO_API_BASE", _DEFAULT_API_BASE).rstrip("/")


def get_data_dir() -> Path:
    """Return the directory that holds the persisted stores."""
    override = os.environ.get("SEALEDFOLIO_DATA_DIR")
    return Path(override).expanduser() if override else _DEFAULT_DATA_DIR


def get_db_path() -> Path:
    """Return the path of the DuckDB database file."""
    return get_data_dir() / _DB_FILENAME


def get_http_timeout() -> float:
    """Return the HTTP timeout in seconds.

    Invalid or non-positive values fall back to the default.
    """
    raw = os.environ.get("SEALEDFOLIO_HTTP_TIMEOUT")
    if not raw:
        return _DEFAULT_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid SEALEDFOLIO_HTTP_TIMEOUT=%r", raw)
        return _DEFAULT_TIMEOUT
    return timeout if timeout > 0 else _DEFAULT_TIMEOUT


def get_log_level() -> int:
    """Return the configured root log level (INFO when unset or unknown)."""
    name = os.environ.get("SEALEDFOLIO_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
