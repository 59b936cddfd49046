"""JSON export and import of the portfolio.

The export document is ``{"settings": {...}, "items": [...]}``. Import
accepts that document or a legacy bare list of items. From imported
settings only ``currency`` and ``theme`` are taken; everything else in
the current settings is kept.

"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np

from sealedfolio.config import SUPPORTED_CURRENCIES, SUPPORTED_THEMES
from sealedfolio.models import PortfolioItem, Settings, uid

logger = logging.getLogger(__name__)

EXPORT_FILENAME_PREFIX = "sealed-pokemon-portfolio"


class ImportFormatError(ValueError):
    """Raised when an import document cannot be used; nothing is applied."""

    def __init__(self, detail: str = "") -> None:
        super().__init__("Invalid file format")
        self.detail = detail


class _PortfolioEncoder(json.JSONEncoder):
    """JSON encoder that handles NumPy types and datetimes."""

    def default(self, o: Any) -> Any:
        """Convert non-serializable types to JSON-safe values."""
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return float(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def default_export_filename(today: date | None = None) -> str:
    """File name for a download, e.g. ``sealed-pokemon-portfolio-2024-05-01.json``."""
    day = today or date.today()
    return f"{EXPORT_FILENAME_PREFIX}-{day.isoformat()}.json"


def export_portfolio_json(
    settings: Settings,
    items: Sequence[PortfolioItem],
    output_path: str | None = None,
) -> str:
    """Export settings and items to JSON format.

    Args:
        settings: Current settings.
        items: Item collection in display order.
        output_path: File or directory to write. A directory gets
            ``default_export_filename()`` inside it. If None, returns
            the JSON string.

    Returns:
        JSON string, or the written file path if output_path given.

    """
    export_data: dict[str, Any] = {
        "settings": settings.to_dict(),
        "items": [item.to_dict() for item in items],
    }
    content = json.dumps(export_data, cls=_PortfolioEncoder, indent=2)

    if output_path:
        target = Path(output_path)
        if target.is_dir():
            target = target / default_export_filename()
        target.write_text(content, encoding="utf-8")
        logger.info("Exported %d items to %s", len(items), target)
        return str(target)
    return content


def _parse_items(raw_items: list[Any]) -> list[PortfolioItem]:
    items: list[PortfolioItem] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            msg = f"item {index} is not an object"
            raise ImportFormatError(msg)
        item = PortfolioItem.from_dict(raw)
        if item.id in seen:
            logger.warning("Duplicate item id %s in import, assigning a new id", item.id)
            item = replace(item, id=uid())
        seen.add(item.id)
        items.append(item)
    return items


def _merge_settings(current: Settings, imported: Any) -> Settings:
    if not isinstance(imported, dict):
        return current
    merged = replace(current)
    if imported.get("currency") in SUPPORTED_CURRENCIES:
        merged.currency = imported["currency"]
    if imported.get("theme") in SUPPORTED_THEMES:
        merged.theme = imported["theme"]
    return merged


def import_portfolio_json(
    content: str,
    settings: Settings,
) -> tuple[list[PortfolioItem] | None, Settings]:
    """Parse an exported document.

    Args:
        content: JSON text of an export (or a legacy bare item list).
        settings: Current settings to merge imported values into.

    Returns:
        Tuple of (items, settings). ``items`` is None when the document
        carries no item list, meaning the current collection is kept.

    Raises:
        ImportFormatError: If the text is not a usable export. No part
            of the document is applied in that case.

    """
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as exc:
        raise ImportFormatError(str(exc)) from exc

    if isinstance(data, list):
        return _parse_items(data), settings

    if not isinstance(data, dict):
        msg = f"unexpected document root {type(data).__name__}"
        raise ImportFormatError(msg)

    raw_items = data.get("items")
    if raw_items is not None and not isinstance(raw_items, list):
        msg = "items must be a list"
        raise ImportFormatError(msg)

    items = _parse_items(raw_items) if raw_items is not None else None
    return items, _merge_settings(settings, data.get("settings"))
