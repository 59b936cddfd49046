"""Tests for the core records and value coercion helpers."""

from __future__ import annotations

import math
import re

import pytest
from sealedfolio.models import (
    CacheEntry,
    PortfolioItem,
    Settings,
    as_amount,
    as_quantity,
    uid,
)


class TestCoercion:
    """Tests for as_amount / as_quantity."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (12.5, 12.5),
            ("7.25", 7.25),
            (0, 0.0),
            (-3, 0.0),
            (math.inf, 0.0),
            (math.nan, 0.0),
            ("abc", 0.0),
            (None, 0.0),
            (True, 0.0),
        ],
    )
    def test_as_amount(self, value, expected):
        assert as_amount(value) == expected

    def test_as_quantity(self):
        assert as_quantity("3") == 3
        assert as_quantity(2.9) == 2
        assert as_quantity(-1) == 0
        assert as_quantity(None) == 1
        assert as_quantity("", default=0) == 0


class TestUid:
    """Tests for id generation."""

    def test_format(self):
        assert re.fullmatch(r"[0-9a-z]+-[0-9a-z]{6}", uid())

    def test_unique(self):
        assert len({uid() for _ in range(200)}) == 200


class TestPortfolioItem:
    """Tests for PortfolioItem."""

    def test_derived_values(self):
        item = PortfolioItem(id="a", quantity=2, price_paid=10.0, market_price=15.0)
        assert item.invested == 20.0
        assert item.market_total == 30.0
        assert item.profit_loss == 10.0

    def test_clamps_on_construction(self):
        item = PortfolioItem(id="a", quantity=-2, price_paid=-1.0, market_price=math.nan)
        assert item.quantity == 0
        assert item.price_paid == 0.0
        assert item.market_price == 0.0

    def test_to_dict_keys(self):
        data = PortfolioItem(id="a", name="ETB").to_dict()
        assert set(data) == {
            "id",
            "name",
            "language",
            "purchaseDate",
            "quantity",
            "pricePaid",
            "marketPrice",
            "marketUpdatedAt",
            "imageUrl",
            "cardmarketUrl",
            "apiId",
            "apiSource",
            "notes",
        }

    def test_dict_round_trip(self, make_item):
        item = make_item(api_id="1", api_source="x", notes="n", market_updated_at=9)
        assert PortfolioItem.from_dict(item.to_dict()) == item

    def test_from_dict_defaults(self):
        item = PortfolioItem.from_dict({"name": "Box", "apiId": 123})
        assert item.id
        assert item.quantity == 1
        assert item.price_paid == 0.0
        assert item.api_id == "123"
        assert item.image_url is None
        assert item.market_updated_at is None

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="object"):
            PortfolioItem.from_dict(["not", "a", "dict"])


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.currency == "EUR"
        assert settings.theme == "dark"
        assert settings.sort_by == "name"
        assert settings.sort_dir == "asc"
        assert settings.last_refresh_at is None

    def test_round_trip(self):
        settings = Settings(currency="USD", theme="light", last_refresh_at=10)
        assert Settings.from_dict(settings.to_dict()) == settings

    def test_from_non_mapping(self):
        assert Settings.from_dict(None) == Settings()

    def test_unsupported_values_fall_back(self):
        settings = Settings.from_dict({"currency": "JPY", "theme": "blue"})
        assert settings.currency == "EUR"
        assert settings.theme == "dark"


class TestCacheEntry:
    """Tests for CacheEntry."""

    def test_from_dict(self):
        entry = CacheEntry.from_dict({"data": {"a": 1}, "fetchedAt": 7})
        assert entry == CacheEntry(data={"a": 1}, fetched_at=7)

    @pytest.mark.parametrize("stamp", ["soon", float("nan"), True, None])
    def test_bad_timestamp_reads_as_zero(self, stamp):
        assert CacheEntry.from_dict({"data": 1, "fetchedAt": stamp}).fetched_at == 0

    def test_missing_timestamp(self):
        assert CacheEntry.from_dict({"data": 1}).fetched_at == 0
