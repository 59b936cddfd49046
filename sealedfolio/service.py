"""Application service: load state, run a core operation, save state.

``PortfolioService`` owns the load/save lifecycle around the pure core.
Each call reads the stores it needs from DuckDB, threads the state
through the core functions and writes back only what changed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from sealedfolio.config import SORT_KEYS, SUPPORTED_CURRENCIES, SUPPORTED_THEMES
from sealedfolio.db.store import (
    load_cache,
    load_items,
    load_settings,
    save_cache,
    save_items,
    save_settings,
)
from sealedfolio.export.csv_export import export_items_csv
from sealedfolio.export.json_export import export_portfolio_json, import_portfolio_json
from sealedfolio.market.cache import StalenessCache
from sealedfolio.market.cooldown import can_refresh, rejection_message
from sealedfolio.market.refresh import refresh_all
from sealedfolio.models import PortfolioItem, now_ms
from sealedfolio.portfolio.aggregation import build_report
from sealedfolio.portfolio.entry import (
    DEFAULT_LANGUAGE,
    Catalog,
    build_item,
    enrich_from_catalog,
    suggestions,
)

if TYPE_CHECKING:
    import duckdb

logger = logging.getLogger(__name__)

_SORT_DIRECTIONS = ("asc", "desc")


class PortfolioService:
    """Portfolio operations over a DuckDB connection and a catalog.

    Args:
        conn: Initialized DuckDB connection (see ``db.connection``).
        catalog: Catalog client used for search, enrichment and refresh.
        clock: Callable returning the current epoch ms.

    """

    def __init__(
        self,
        conn: duckdb.DuckDBPyConnection,
        catalog: Catalog,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.conn = conn
        self.catalog = catalog
        self.clock = clock

    def _cache(self) -> StalenessCache:
        return StalenessCache(
            load_cache(self.conn),
            clock=self.clock,
            persist=lambda entries: save_cache(self.conn, entries),
        )

    # ── Reporting ──

    def report(self, search: str = "") -> dict[str, Any]:
        """Table rows, summary and chart data for the current view."""
        return build_report(load_items(self.conn), load_settings(self.conn), search)

    def list_items(self) -> list[dict[str, Any]]:
        return [item.to_dict() for item in load_items(self.conn)]

    # ── Items ──

    def save_item(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Create a lot, or update the lot whose ``id`` is in ``fields``.

        The lot is enriched from the catalog before it is stored.
        """
        items = load_items(self.conn)
        item_id = fields.get("id")
        index = next((i for i, it in enumerate(items) if it.id == item_id), None)
        existing = items[index] if index is not None else None

        item = enrich_from_catalog(build_item(fields, existing), self.catalog)
        if index is not None:
            items[index] = item
        else:
            items.append(item)
        save_items(self.conn, items)
        logger.info("Saved item %s (%s)", item.id, item.name)
        return item.to_dict()

    def delete_item(self, item_id: str) -> dict[str, Any]:
        """Remove a lot by id.

        Raises:
            ValueError: If no lot has that id.

        """
        items = load_items(self.conn)
        remaining = [it for it in items if it.id != item_id]
        if len(remaining) == len(items):
            msg = f"No item with id '{item_id}'"
            raise ValueError(msg)
        save_items(self.conn, remaining)
        return {"deleted": item_id, "count": len(remaining)}

    # ── Market refresh ──

    def refresh_status(self) -> dict[str, Any]:
        status = can_refresh(load_settings(self.conn), now=self.clock())
        status["message"] = (
            "" if status["allowed"] else rejection_message(status["remainingMs"])
        )
        return status

    def refresh_prices(self) -> dict[str, Any]:
        """Refresh every catalog-linked lot, unless still cooling down.

        Returns:
            Dict with ``refreshed`` and, when rejected, the remaining wait
            and a user-facing message; when run, whether anything changed.

        """
        settings = load_settings(self.conn)
        status = can_refresh(settings, now=self.clock())
        if not status["allowed"]:
            return {
                "refreshed": False,
                "remainingMs": status["remainingMs"],
                "message": rejection_message(status["remainingMs"]),
            }

        items: list[PortfolioItem] = load_items(self.conn)
        changed = refresh_all(
            items,
            self._cache(),
            self.catalog.fetch_product_detail,
            clock=self.clock,
        )
        if changed:
            save_items(self.conn, items)

        settings.last_refresh_at = self.clock()
        save_settings(self.conn, settings)
        return {
            "refreshed": True,
            "changed": changed,
            "lastRefreshAt": settings.last_refresh_at,
        }

    # ── Catalog ──

    def search_catalog(
        self,
        query: str,
        limit: int = 10,
        language: str = DEFAULT_LANGUAGE,
    ) -> list[dict[str, Any]]:
        return suggestions(self.catalog.search_products(query.strip(), limit), language)

    # ── Settings ──

    def get_settings(self) -> dict[str, Any]:
        return load_settings(self.conn).to_dict()

    def update_settings(
        self,
        currency: str | None = None,
        theme: str | None = None,
        sortBy: str | None = None,  # noqa: N803
        sortDir: str | None = None,  # noqa: N803
    ) -> dict[str, Any]:
        """Change display settings.

        Raises:
            ValueError: If a value is not one of the supported choices.

        """
        settings = load_settings(self.conn)
        checks = (
            ("currency", currency, SUPPORTED_CURRENCIES),
            ("theme", theme, SUPPORTED_THEMES),
            ("sortBy", sortBy, SORT_KEYS),
            ("sortDir", sortDir, _SORT_DIRECTIONS),
        )
        for name, value, allowed in checks:
            if value is not None and value not in allowed:
                msg = f"{name} must be one of {allowed}, got '{value}'"
                raise ValueError(msg)

        if currency is not None:
            settings.currency = currency
        if theme is not None:
            settings.theme = theme
        if sortBy is not None:
            settings.sort_by = sortBy
        if sortDir is not None:
            settings.sort_dir = sortDir
        save_settings(self.conn, settings)
        return settings.to_dict()

    # ── Export / import ──

    def export_json(self, output_path: str | None = None) -> str:
        return export_portfolio_json(
            load_settings(self.conn),
            load_items(self.conn),
            output_path=output_path,
        )

    def import_json(self, content: str) -> dict[str, Any]:
        """Replace items (and currency/theme) from an export document.

        Raises:
            ImportFormatError: If the document is unusable; nothing changes.

        """
        items, settings = import_portfolio_json(content, load_settings(self.conn))
        if items is not None:
            save_items(self.conn, items)
        save_settings(self.conn, settings)
        count = len(items) if items is not None else len(load_items(self.conn))
        logger.info("Imported portfolio: %d items", count)
        return {"items": count, "settings": settings.to_dict()}

    def export_csv(self, output_path: str | None = None) -> str:
        settings = load_settings(self.conn)
        return export_items_csv(
            load_items(self.conn),
            currency=settings.currency,
            output_path=output_path,
        )
