"""Cardmarket link helpers.

Product links always pin ``sellerCountry=7`` and, for English and
German lots, the Cardmarket ``language`` filter. Items without a usable
product URL get a product-search link built from their name.

"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

if TYPE_CHECKING:
    from sealedfolio.models import PortfolioItem

CARDMARKET_SEARCH_URL = "https://www.cardmarket.com/de/Pokemon/Products/Search"
SELLER_COUNTRY = "7"

_HTTP_URL = re.compile(r"^https?://", re.IGNORECASE)

# Language prefix -> Cardmarket language filter value
_LANGUAGE_PARAMS = {
    "english": "1",
    "german": "3",
}


def is_valid_http_url(url: Any) -> bool:
    return isinstance(url, str) and bool(_HTTP_URL.match(url))


def cardmarket_language_param(language: str | None) -> str | None:
    """Return the Cardmarket language filter for a lot language, if known."""
    if not language:
        return None
    lang = str(language).lower()
    for prefix, param in _LANGUAGE_PARAMS.items():
        if lang.startswith(prefix):
            return param
    return None


def _with_params(url: str, params: dict[str, str]) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update(params)
    return urlunsplit(parts._replace(query=urlencode(query)))


def build_cardmarket_url(base_url: Any, language: str | None) -> str:
    """Add seller-country and language filters to a product URL.

    Returns an empty string for anything that is not an http(s) URL.
    """
    if not is_valid_http_url(base_url):
        return ""
    params = {"sellerCountry": SELLER_COUNTRY}
    lang_param = cardmarket_language_param(language)
    if lang_param:
        params["language"] = lang_param
    try:
        return _with_params(base_url, params)
    except ValueError:
        return str(base_url)


def build_cardmarket_search(name: str | None, language: str | None) -> str:
    """Build a Cardmarket product-search URL for ``name``."""
    if not name:
        return ""
    params = {"searchString": name, "sellerCountry": SELLER_COUNTRY}
    lang_param = cardmarket_language_param(language)
    if lang_param:
        params["language"] = lang_param
    return f"{CARDMARKET_SEARCH_URL}?{urlencode(params)}"


def item_link(item: PortfolioItem) -> str:
    """Best Cardmarket link for an item: product page, else a search."""
    link = build_cardmarket_url(item.cardmarket_url, item.language)
    return link or build_cardmarket_search(item.name, item.language)
