"""Portfolio aggregation engine.

Derives every reporting figure from the item collection: filtered and
sorted views, per-lot invested / market value / profit-loss, summary
totals, the cumulative monthly invested-vs-estimated series, the top
holdings ranking and the market value split by language.

All functions are pure: they read items and settings and return new
lists and dicts.

"""

from __future__ import annotations

import locale
import re
import unicodedata
from collections.abc import Callable, Iterable, Sequence
from typing import Any

import pandas as pd

from sealedfolio.catalog.links import item_link
from sealedfolio.formatting import format_money
from sealedfolio.models import PortfolioItem, Settings

# Number of bars / slices in the ranking charts
TOP_N = 6

OTHER_LANGUAGE = "Other"
UNNAMED_ITEM = "Item"

_SORT_KEYS: dict[str, Callable[[PortfolioItem], Any]] = {
    "name": lambda it: it.name,
    "purchaseDate": lambda it: it.purchase_date or "",
    "quantity": lambda it: it.quantity,
    "pricePaid": lambda it: it.price_paid,
    "marketPrice": lambda it: it.market_price,
    "invested": lambda it: it.invested,
    "marketTotal": lambda it: it.market_total,
    "pl": lambda it: it.profit_loss,
}

_STRING_SORT_KEYS = frozenset({"name", "purchaseDate"})

# A parseable purchase date carries a four-digit year; relative words such
# as "today" are rejected
_YEAR = re.compile(r"\d{4}")


def filter_items(
    items: Iterable[PortfolioItem],
    search_term: str | None = "",
) -> list[PortfolioItem]:
    """Keep items whose name, language or notes contain ``search_term``.

    Matching is a case-insensitive substring test; an empty term keeps
    everything.
    """
    term = (search_term or "").strip().lower()
    if not term:
        return list(items)
    return [
        it
        for it in items
        if term in it.name.lower()
        or term in it.language.lower()
        or term in it.notes.lower()
    ]


def collation_key(text: str) -> str:
    """Locale collation key with accents folded and case ignored.

    NUL characters are dropped, since ``strxfrm`` rejects them.
    """
    decomposed = unicodedata.normalize("NFKD", text.replace("\x00", ""))
    folded = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return locale.strxfrm(folded.casefold())


def _sort_key(key_name: str) -> Callable[[PortfolioItem], Any]:
    """Key function for a column; string columns use ``collation_key``."""
    raw_key = _SORT_KEYS[key_name]
    if key_name not in _STRING_SORT_KEYS:
        return raw_key

    def collated(item: PortfolioItem) -> Any:
        return collation_key(raw_key(item))

    return collated


def sort_items(
    items: Iterable[PortfolioItem],
    sort_by: str | None = "name",
    sort_dir: str | None = "asc",
) -> list[PortfolioItem]:
    """Sort items by a display column.

    Args:
        items: Items to sort; the input is not modified.
        sort_by: One of name, purchaseDate, quantity, pricePaid,
            marketPrice, invested, marketTotal, pl. Unknown keys sort
            by name.
        sort_dir: "desc" for descending; anything else is ascending.

    Returns:
        A new list. Ties keep their original relative order in both
        directions.

    """
    key_name = sort_by if sort_by in _SORT_KEYS else "name"
    descending = (sort_dir or "asc").lower() == "desc"
    return sorted(items, key=_sort_key(key_name), reverse=descending)


def item_metrics(item: PortfolioItem) -> dict[str, Any]:
    """Per-lot derived figures; ``positive`` is True for P&L >= 0."""
    pl = item.profit_loss
    return {
        "invested": item.invested,
        "marketTotal": item.market_total,
        "pl": pl,
        "positive": pl >= 0,
    }


def compute_summary(items: Iterable[PortfolioItem]) -> dict[str, Any]:
    """Totals and per-unit averages over ``items``.

    Averages are 0 when the total quantity is 0.
    """
    total_qty = 0
    invested = 0.0
    estimated = 0.0
    for it in items:
        total_qty += it.quantity
        invested += it.invested
        estimated += it.market_total

    return {
        "totalItems": total_qty,
        "invested": invested,
        "estimated": estimated,
        "pl": estimated - invested,
        "avgPaid": invested / total_qty if total_qty else 0.0,
        "avgMarket": estimated / total_qty if total_qty else 0.0,
    }


def month_key(date_str: str | None) -> str | None:
    """Return ``YYYY-MM`` for a purchase date, or None if unparseable."""
    if not date_str or not _YEAR.search(date_str):
        return None
    stamp = pd.to_datetime(date_str, errors="coerce")
    if pd.isna(stamp):
        return None
    return str(stamp.strftime("%Y-%m"))


def compute_time_series(items: Iterable[PortfolioItem]) -> dict[str, list[Any]]:
    """Cumulative invested and estimated value by purchase month.

    Items without a parseable purchase date are left out. Months are
    ascending and each value is the running total up to that month.

    Returns:
        Dict with parallel lists ``labels``, ``invested``, ``estimated``.

    """
    rows = [
        (key, it.invested, it.market_total)
        for it in items
        if (key := month_key(it.purchase_date)) is not None
    ]
    if not rows:
        return {"labels": [], "invested": [], "estimated": []}

    frame = pd.DataFrame(rows, columns=["month", "invested", "estimated"])
    running = frame.groupby("month", sort=True)[["invested", "estimated"]].sum().cumsum()
    return {
        "labels": [str(label) for label in running.index],
        "invested": [float(v) for v in running["invested"]],
        "estimated": [float(v) for v in running["estimated"]],
    }


def _rank(pairs: Sequence[tuple[str, float]], limit: int) -> list[tuple[str, float]]:
    return sorted(pairs, key=lambda pair: pair[1], reverse=True)[:limit]


def top_holdings(
    items: Iterable[PortfolioItem],
    limit: int = TOP_N,
) -> list[dict[str, Any]]:
    """Largest lots by market total, descending."""
    pairs = [(it.name or UNNAMED_ITEM, it.market_total) for it in items]
    return [{"name": name, "value": value} for name, value in _rank(pairs, limit)]


def group_by_language(
    items: Iterable[PortfolioItem],
    limit: int = TOP_N,
) -> list[dict[str, Any]]:
    """Market total per language, descending, top ``limit`` groups."""
    totals: dict[str, float] = {}
    for it in items:
        key = it.language or OTHER_LANGUAGE
        totals[key] = totals.get(key, 0.0) + it.market_total
    ranked = _rank(list(totals.items()), limit)
    return [{"language": lang, "value": value} for lang, value in ranked]


def _display_row(item: PortfolioItem, currency: str) -> dict[str, Any]:
    metrics = item_metrics(item)
    has_market = bool(item.market_price)
    return {
        **item.to_dict(),
        **metrics,
        "link": item_link(item),
        "display": {
            "pricePaid": format_money(item.price_paid, currency),
            "invested": format_money(metrics["invested"], currency),
            "marketPrice": format_money(item.market_price, currency) if has_market else "-",
            "marketTotal": (
                format_money(metrics["marketTotal"], currency) if has_market else "-"
            ),
            "pl": format_money(metrics["pl"], currency) if has_market else "-",
        },
    }


def build_report(
    items: Sequence[PortfolioItem],
    settings: Settings,
    search_term: str | None = "",
) -> dict[str, Any]:
    """Everything the presentation layer draws, in one call.

    The table rows and summary reflect the filtered, sorted view; the
    charts always cover the whole collection.
    """
    view = sort_items(
        filter_items(items, search_term),
        settings.sort_by,
        settings.sort_dir,
    )
    summary = compute_summary(view)
    currency = settings.currency
    return {
        "currency": currency,
        "rows": [_display_row(it, currency) for it in view],
        "summary": summary,
        "summaryDisplay": {
            key: format_money(summary[key], currency)
            for key in ("invested", "estimated", "pl", "avgPaid", "avgMarket")
        },
        "charts": {
            "timeSeries": compute_time_series(items),
            "topHoldings": top_holdings(items),
            "byLanguage": group_by_language(items),
        },
    }
