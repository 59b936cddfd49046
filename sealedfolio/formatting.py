"""Money formatting for reports and exports."""

from __future__ import annotations

import math
from typing import Any

_CURRENCY_SYMBOLS = {
    "USD": "$",
    "GBP": "£",
    "CHF": "CHF ",
    "EUR": "€",
}


def currency_symbol(code: str | None) -> str:
    """Display prefix for a currency code; unknown codes render as euros."""
    return _CURRENCY_SYMBOLS.get(code or "", "€")


def format_money(value: Any, code: str | None) -> str:
    """Format ``value`` with two decimals and the currency prefix.

    Missing, non-numeric and non-finite values are shown as zero.
    """
    try:
        amount = float(value or 0)
    except (TypeError, ValueError):
        amount = 0.0
    if not math.isfinite(amount):
        amount = 0.0
    return f"{currency_symbol(code)}{amount:.2f}"
