"""Shared pytest fixtures for SealedFolio tests."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import duckdb
import pytest
from sealedfolio.db.connection import init_memory_db
from sealedfolio.models import PortfolioItem

# 2023-11-14T22:13:20Z
FIXED_NOW_MS = 1_700_000_000_000


class FakeClock:
    """Settable epoch-ms clock."""

    def __init__(self, now: int = FIXED_NOW_MS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    """Provide a clock frozen at a fixed instant."""
    return FakeClock()


@pytest.fixture
def db() -> Iterator[duckdb.DuckDBPyConnection]:
    """Provide an in-memory database with the full schema."""
    conn = init_memory_db()
    yield conn
    conn.close()


@pytest.fixture
def make_item() -> Callable[..., PortfolioItem]:
    """Factory for portfolio items with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> PortfolioItem:
        counter["n"] += 1
        fields: dict[str, Any] = {
            "id": f"item-{counter['n']}",
            "name": f"Booster Box {counter['n']}",
            "language": "English",
            "purchase_date": "2024-01-15",
            "quantity": 1,
            "price_paid": 100.0,
            "market_price": 120.0,
        }
        fields.update(overrides)
        return PortfolioItem(**fields)

    return _make


@pytest.fixture
def sample_items(make_item: Callable[..., PortfolioItem]) -> list[PortfolioItem]:
    """Provide a small mixed-language collection."""
    return [
        make_item(
            name="Evolving Skies Booster Box",
            language="English",
            purchase_date="2024-01-05",
            quantity=2,
            price_paid=10.0,
            market_price=15.0,
            api_id="101",
        ),
        make_item(
            name="Crown Zenith Elite Trainer Box",
            language="German",
            purchase_date="2024-02-10",
            quantity=1,
            price_paid=20.0,
            market_price=18.0,
            api_id="202",
            notes="gift from Sam",
        ),
        make_item(
            name="151 Booster Bundle",
            language="French",
            purchase_date="",
            quantity=3,
            price_paid=5.0,
            market_price=7.0,
        ),
    ]
