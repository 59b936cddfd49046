"""Bulk market-data refresh for portfolio items.

Walks the item list in order. For each item linked to the catalog it
takes the product record from the staleness cache when fresh, or
fetches it through the detail collaborator and caches it. The record's
image, Cardmarket link and language price are then applied to the
item in place. A failed fetch skips that item only; items already
updated stay updated.

"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from typing import Any

from sealedfolio.catalog.normalize import (
    cardmarket_prices,
    normalize_product,
    unwrap_detail,
)
from sealedfolio.catalog.pricing import price_for_language
from sealedfolio.market.cache import StalenessCache
from sealedfolio.models import PortfolioItem, now_ms

logger = logging.getLogger(__name__)

FetchDetail = Callable[[str], Any]


def _load_record(
    item: PortfolioItem,
    cache: StalenessCache,
    fetch_detail: FetchDetail,
) -> Any:
    """Return the catalog record for ``item``, or None if unavailable."""
    key = str(item.api_id)
    cached = cache.get_fresh(key)
    if cached is not None:
        return cached

    try:
        detail = fetch_detail(key)
    except Exception:  # noqa: BLE001
        logger.exception("Detail fetch failed for %s (%s)", item.name, key)
        return None

    record = unwrap_detail(detail)
    if record is None:
        logger.warning("No catalog detail for %s (%s)", item.name, key)
        return None
    cache.put(key, record)
    return record


def apply_catalog_record(item: PortfolioItem, record: Any, now: int) -> bool:
    """Copy image, link and language price from ``record`` onto ``item``.

    Each field is written only when the new value differs, and
    ``market_updated_at`` is stamped only when something changed.

    Returns:
        True if the item was modified.

    """
    product = normalize_product(record)
    new_image = product.image or item.image_url
    new_link = product.cm_link or item.cardmarket_url
    lang_price = price_for_language(cardmarket_prices(record), item.language)
    new_price = lang_price if lang_price is not None else item.market_price

    changed = False
    if new_image and str(new_image) != item.image_url:
        item.image_url = str(new_image)
        changed = True
    if new_link and str(new_link) != item.cardmarket_url:
        item.cardmarket_url = str(new_link)
        changed = True
    if math.isfinite(new_price) and new_price >= 0 and new_price != item.market_price:
        item.market_price = float(new_price)
        changed = True

    if changed:
        item.market_updated_at = now
    return changed


def refresh_all(
    items: Iterable[PortfolioItem],
    cache: StalenessCache,
    fetch_detail: FetchDetail,
    clock: Callable[[], int] = now_ms,
) -> bool:
    """Refresh market data for every catalog-linked item, in order.

    Args:
        items: Items to update in place. Items without ``api_id`` are skipped.
        cache: Staleness cache consulted before, and filled after, each fetch.
        fetch_detail: Collaborator returning the detail payload for a
            catalog id, or None on failure.
        clock: Callable returning the current epoch ms.

    Returns:
        True if any item changed, so the caller knows to persist.

    """
    changed = False
    updated = 0
    skipped = 0
    for item in items:
        if not item.api_id:
            continue
        record = _load_record(item, cache, fetch_detail)
        if record is None:
            skipped += 1
            continue
        if apply_catalog_record(item, record, clock()):
            updated += 1
            changed = True

    logger.info("Market refresh: %d item(s) updated, %d skipped", updated, skipped)
    return changed
