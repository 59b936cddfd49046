"""Language-specific market price resolution.

Cardmarket price blocks carry a global ``lowest`` figure plus regional
``lowest_DE`` / ``lowest_FR`` figures. German and French lots prefer
their regional figure and fall back to the global one; every other
language prefers the global figure, then German, then French.

"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

# Language prefix -> candidate keys in order; None is the default path
PRICE_PRECEDENCE: dict[str | None, tuple[str, ...]] = {
    "german": ("lowest_DE", "lowest"),
    "french": ("lowest_FR", "lowest"),
    None: ("lowest", "lowest_DE", "lowest_FR"),
}


def _as_price(value: Any) -> float | None:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return price if math.isfinite(price) else None


def price_keys_for_language(language: str | None) -> tuple[str, ...]:
    """Return the price-block keys to try for ``language``, in order."""
    lang = (language or "").lower()
    for prefix, keys in PRICE_PRECEDENCE.items():
        if prefix is not None and lang.startswith(prefix):
            return keys
    return PRICE_PRECEDENCE[None]


def price_for_language(
    price_block: Mapping[str, Any] | None,
    language: str | None,
) -> float | None:
    """Pick the lowest-price figure matching a lot's language.

    Args:
        price_block: Mapping with optional ``lowest``, ``lowest_DE`` and
            ``lowest_FR`` figures, or None.
        language: Free-form language of the lot ("German", "english", ...).

    Returns:
        The first figure present in precedence order, or None when the
        block is missing or holds none of the candidates. Zero counts as
        present.

    """
    if not price_block:
        return None
    for key in price_keys_for_language(language):
        value = price_block.get(key)
        if value is not None:
            return _as_price(value)
    return None
