"""Cooldown gate for bulk market-price refreshes."""

from __future__ import annotations

import math
from typing import Any

from sealedfolio.config import COOLDOWN_MS
from sealedfolio.models import Settings, now_ms

_MS_PER_MINUTE = 60_000


def can_refresh(
    settings: Settings,
    cooldown_ms: int = COOLDOWN_MS,
    now: int | None = None,
) -> dict[str, Any]:
    """Check whether a bulk refresh is allowed right now.

    Pure query: the caller records ``last_refresh_at`` only after a
    refresh has actually completed.

    Args:
        settings: Current settings; ``last_refresh_at`` unset means never.
        cooldown_ms: Minimum gap between refreshes in milliseconds.
        now: Current epoch ms (defaults to the wall clock).

    Returns:
        Dict with ``allowed`` (bool) and ``remainingMs`` (non-negative int).

    """
    current = now_ms() if now is None else now
    last = settings.last_refresh_at or 0
    remaining = max(0, cooldown_ms - (current - last))
    return {"allowed": remaining == 0, "remainingMs": int(remaining)}


def format_remaining(ms: int) -> str:
    """Render a wait time in whole minutes, rounded up ("1 min", "5 mins")."""
    minutes = math.ceil(ms / _MS_PER_MINUTE)
    return "1 min" if minutes <= 1 else f"{minutes} mins"


def rejection_message(remaining_ms: int) -> str:
    return f"Please wait {format_remaining(remaining_ms)} before refreshing again."
