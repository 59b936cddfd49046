"""Core records: portfolio lots, display settings and cache entries.

Attributes are snake_case in Python. The persisted and exported JSON
uses the camelCase keys of the browser-era data files, so items and
settings convert through ``to_dict`` / ``from_dict``; cache rows load
through ``CacheEntry.from_dict``.

"""

from __future__ import annotations

import math
import random
import string
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sealedfolio.config import SUPPORTED_CURRENCIES, SUPPORTED_THEMES

_BASE36 = string.digits + string.ascii_lowercase
_UID_SUFFIX_LEN = 6

# Python attribute -> JSON key
_ITEM_KEYS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "language": "language",
    "purchase_date": "purchaseDate",
    "quantity": "quantity",
    "price_paid": "pricePaid",
    "market_price": "marketPrice",
    "market_updated_at": "marketUpdatedAt",
    "image_url": "imageUrl",
    "cardmarket_url": "cardmarketUrl",
    "api_id": "apiId",
    "api_source": "apiSource",
    "notes": "notes",
}


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def uid() -> str:
    """Generate a unique item id: base-36 timestamp plus a random suffix."""
    suffix = "".join(random.choices(_BASE36, k=_UID_SUFFIX_LEN))  # noqa: S311
    return f"{_to_base36(now_ms())}-{suffix}"


def as_amount(value: Any) -> float:
    """Coerce a monetary value; non-finite, negative or invalid become 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def as_quantity(value: Any, default: int = 1) -> int:
    """Coerce a lot quantity to a non-negative integer."""
    if value is None or value == "":
        return default
    amount = as_amount(value)
    return int(amount)


def _as_timestamp(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if math.isfinite(number) else None


def _as_optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


@dataclass
class PortfolioItem:
    """One owned lot of a sealed product.

    Attributes:
        id: Stable unique id, assigned at creation and never changed.
        name: Product name.
        language: Free-form product language ("English", "German", ...).
        purchase_date: ISO date string, or empty.
        quantity: Units held.
        price_paid: Unit purchase price.
        market_price: Last known unit market price.
        market_updated_at: Epoch ms of the last market update.
        image_url: Product image URL.
        cardmarket_url: Product page on Cardmarket.
        api_id: External catalog id.
        api_source: Provenance tag for ``api_id``.
        notes: Free-text notes.

    """

    id: str
    name: str = ""
    language: str = ""
    purchase_date: str = ""
    quantity: int = 1
    price_paid: float = 0.0
    market_price: float = 0.0
    market_updated_at: int | None = None
    image_url: str | None = None
    cardmarket_url: str | None = None
    api_id: str | None = None
    api_source: str | None = None
    notes: str = ""

    def __post_init__(self) -> None:
        """Clamp numeric fields to their invariants."""
        self.quantity = as_quantity(self.quantity, default=0)
        self.price_paid = as_amount(self.price_paid)
        self.market_price = as_amount(self.market_price)

    @property
    def invested(self) -> float:
        return self.quantity * self.price_paid

    @property
    def market_total(self) -> float:
        return self.quantity * self.market_price

    @property
    def profit_loss(self) -> float:
        return self.quantity * (self.market_price - self.price_paid)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys."""
        return {key: getattr(self, attr) for attr, key in _ITEM_KEYS.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PortfolioItem:
        """Build an item from a persisted or imported mapping.

        Missing ids get a fresh one; everything else degrades to defaults.

        Raises:
            ValueError: If ``data`` is not a mapping.

        """
        if not isinstance(data, Mapping):
            msg = f"Portfolio item must be an object, got {type(data).__name__}"
            raise ValueError(msg)
        return cls(
            id=str(data.get("id") or uid()),
            name=str(data.get("name") or ""),
            language=str(data.get("language") or ""),
            purchase_date=str(data.get("purchaseDate") or ""),
            quantity=as_quantity(data.get("quantity")),
            price_paid=as_amount(data.get("pricePaid")),
            market_price=as_amount(data.get("marketPrice")),
            market_updated_at=_as_timestamp(data.get("marketUpdatedAt")),
            image_url=_as_optional_str(data.get("imageUrl")),
            cardmarket_url=_as_optional_str(data.get("cardmarketUrl")),
            api_id=_as_optional_str(data.get("apiId")),
            api_source=_as_optional_str(data.get("apiSource")),
            notes=str(data.get("notes") or ""),
        )


@dataclass
class Settings:
    """Process-wide display and session state."""

    currency: str = "EUR"
    theme: str = "dark"
    sort_by: str = "name"
    sort_dir: str = "asc"
    last_refresh_at: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "currency": self.currency,
            "theme": self.theme,
            "sortBy": self.sort_by,
            "sortDir": self.sort_dir,
            "lastRefreshAt": self.last_refresh_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Settings:
        """Build settings, substituting defaults for absent or invalid keys."""
        if not isinstance(data, Mapping):
            return cls()
        defaults = cls()
        currency = data.get("currency")
        theme = data.get("theme")
        return cls(
            currency=currency if currency in SUPPORTED_CURRENCIES else defaults.currency,
            theme=theme if theme in SUPPORTED_THEMES else defaults.theme,
            sort_by=str(data.get("sortBy") or defaults.sort_by),
            sort_dir=str(data.get("sortDir") or defaults.sort_dir),
            last_refresh_at=_as_timestamp(data.get("lastRefreshAt")),
        )


@dataclass
class CacheEntry:
    """A fetched catalog record and the time it was fetched (epoch ms)."""

    data: Any
    fetched_at: int = field(default=0)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CacheEntry:
        """Build an entry from ``{"data", "fetchedAt"}``; a bad timestamp reads as 0."""
        return cls(
            data=data.get("data"),
            fetched_at=_as_timestamp(data.get("fetchedAt")) or 0,
        )
