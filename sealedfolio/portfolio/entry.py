"""Item entry: building lots from submitted fields and catalog enrichment.

When a lot is saved, any catalog id on it is looked up to fill in a
missing image, a missing Cardmarket link and the price for the lot's
language. If the lot is still missing its id, image or market price,
the catalog is searched by name and the best hit fills the gaps.

"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from sealedfolio.catalog.normalize import (
    cardmarket_prices,
    normalize_product,
    unwrap_detail,
)
from sealedfolio.catalog.pricing import price_for_language
from sealedfolio.config import API_SOURCE
from sealedfolio.models import PortfolioItem, as_amount, as_quantity, now_ms, uid

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "English"


class Catalog(Protocol):
    """The two catalog lookups entry and refresh rely on."""

    def search_products(self, query: str, limit: int = 10) -> list[Any]: ...

    def fetch_product_detail(self, product_id: str) -> Any: ...


def _text(fields: Mapping[str, Any], key: str) -> str:
    value = fields.get(key)
    return str(value).strip() if value is not None else ""


def build_item(
    fields: Mapping[str, Any],
    existing: PortfolioItem | None = None,
) -> PortfolioItem:
    """Create or replace a lot from submitted form fields.

    Args:
        fields: camelCase field mapping as submitted by the UI.
        existing: The lot being edited, if any. Its id is kept.

    Returns:
        A new ``PortfolioItem``.

    Raises:
        ValueError: If the name is empty.

    """
    name = _text(fields, "name")
    if not name:
        msg = "name must be a non-empty string"
        raise ValueError(msg)

    return PortfolioItem(
        id=existing.id if existing else uid(),
        name=name,
        language=_text(fields, "language") or DEFAULT_LANGUAGE,
        purchase_date=_text(fields, "purchaseDate"),
        quantity=as_quantity(fields.get("quantity")) or 1,
        price_paid=as_amount(fields.get("pricePaid")),
        market_price=as_amount(fields.get("marketPrice")),
        market_updated_at=existing.market_updated_at if existing else None,
        image_url=_text(fields, "imageUrl") or None,
        cardmarket_url=_text(fields, "cardmarketUrl") or None,
        api_id=_text(fields, "apiId") or None,
        notes=_text(fields, "notes"),
    )


def _apply_price(item: PortfolioItem, record: Any) -> None:
    price = price_for_language(cardmarket_prices(record), item.language)
    if price is not None and price >= 0:
        item.market_price = price
        item.market_updated_at = now_ms()


def _fill_from_detail(item: PortfolioItem, record: Any) -> None:
    product = normalize_product(record)
    if not item.image_url and product.image:
        item.image_url = str(product.image)
    if not item.cardmarket_url and product.cm_link:
        item.cardmarket_url = str(product.cm_link)
    _apply_price(item, record)


def _fill_from_search_hit(item: PortfolioItem, record: Any) -> None:
    product = normalize_product(record)
    item.api_id = str(product.id or item.api_id or "") or None
    if product.image:
        item.image_url = str(product.image)
    if not item.cardmarket_url and product.cm_link:
        item.cardmarket_url = str(product.cm_link)
    _apply_price(item, record)


def enrich_from_catalog(item: PortfolioItem, catalog: Catalog) -> PortfolioItem:
    """Fill image, link, catalog id and market price from the catalog.

    Lookup failures leave the item as submitted.

    Returns:
        The same item, updated in place.

    """
    try:
        if item.api_id:
            record = unwrap_detail(catalog.fetch_product_detail(item.api_id))
            if record:
                _fill_from_detail(item, record)

        incomplete = not item.api_id or not item.image_url or not item.market_price
        if incomplete and item.name:
            hits = catalog.search_products(item.name, 1)
            if hits:
                _fill_from_search_hit(item, hits[0])
    except Exception:  # noqa: BLE001
        logger.exception("Catalog enrichment failed for %s", item.name)

    item.api_source = API_SOURCE if item.api_id else None
    return item


def suggestions(results: list[Any], language: str | None) -> list[dict[str, Any]]:
    """Shape catalog search hits for name autocompletion.

    Each suggestion carries the normalized product fields plus the
    price for ``language`` and the price block's currency.
    """
    out: list[dict[str, Any]] = []
    for record in results:
        product = normalize_product(record)
        prices = cardmarket_prices(record)
        out.append(
            {
                **product.to_dict(),
                "price": price_for_language(prices, language),
                "currency": (prices or {}).get("currency") or "EUR",
            }
        )
    return out
