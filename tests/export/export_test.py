"""Tests for CSV and JSON export modules."""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from pathlib import Path

import numpy as np
import pytest
from sealedfolio.export.csv_export import export_items_csv
from sealedfolio.export.json_export import (
    ImportFormatError,
    _PortfolioEncoder,
    default_export_filename,
    export_portfolio_json,
    import_portfolio_json,
)
from sealedfolio.models import Settings


def _data_rows(csv_str: str) -> list[dict[str, str]]:
    lines = [line for line in csv_str.splitlines() if not line.startswith("#")]
    return list(csv.DictReader(io.StringIO("\n".join(lines))))


class TestExportItemsCSV:
    """Test holdings CSV export."""

    def test_basic_export(self, make_item):
        item = make_item(name="ETB", quantity=2, price_paid=10.0, market_price=15.5)
        csv_str = export_items_csv([item], currency="USD")
        assert "# Holdings Export" in csv_str
        assert "# Currency: USD" in csv_str

        rows = _data_rows(csv_str)
        assert len(rows) == 1
        assert rows[0]["name"] == "ETB"
        assert rows[0]["quantity"] == "2"
        assert rows[0]["invested"] == "20.00"
        assert rows[0]["marketTotal"] == "31.00"
        assert rows[0]["pl"] == "11.00"
        assert rows[0]["apiId"] == ""

    def test_export_to_file(self, tmp_path, make_item):
        out_path = str(tmp_path / "holdings.csv")
        result = export_items_csv([make_item(name="Box")], output_path=out_path)
        assert result == out_path
        content = Path(out_path).read_text(encoding="utf-8")
        assert "Box" in content

    def test_empty_items(self):
        csv_str = export_items_csv([])
        assert "# Holdings Export" in csv_str
        assert _data_rows(csv_str) == []

    def test_keeps_order(self, make_item):
        items = [make_item(name="z"), make_item(name="a")]
        assert [row["name"] for row in _data_rows(export_items_csv(items))] == ["z", "a"]


class TestExportPortfolioJSON:
    """Test JSON export."""

    def test_document_shape(self, sample_items):
        settings = Settings(currency="GBP", theme="light")
        data = json.loads(export_portfolio_json(settings, sample_items))
        assert set(data) == {"settings", "items"}
        assert data["settings"]["currency"] == "GBP"
        assert [it["id"] for it in data["items"]] == [it.id for it in sample_items]
        assert data["items"][0]["pricePaid"] == 10.0

    def test_export_to_file(self, tmp_path, sample_items):
        out_path = str(tmp_path / "portfolio.json")
        result = export_portfolio_json(Settings(), sample_items, output_path=out_path)
        assert result == out_path
        data = json.loads(Path(out_path).read_text(encoding="utf-8"))
        assert len(data["items"]) == 3

    def test_export_into_directory_uses_dated_name(self, tmp_path, sample_items):
        result = export_portfolio_json(Settings(), sample_items, output_path=str(tmp_path))
        expected = tmp_path / default_export_filename()
        assert result == str(expected)
        assert len(json.loads(expected.read_text(encoding="utf-8"))["items"]) == 3

    def test_encoder_handles_numpy_and_datetime(self):
        payload = {
            "f": np.float64(1.5),
            "i": np.int64(3),
            "a": np.array([1, 2]),
            "t": datetime(2024, 1, 5, 12, 0),
        }
        decoded = json.loads(json.dumps(payload, cls=_PortfolioEncoder))
        assert decoded == {"f": 1.5, "i": 3, "a": [1, 2], "t": "2024-01-05T12:00:00"}

    def test_default_filename(self):
        assert default_export_filename(date(2024, 5, 1)) == (
            "sealed-pokemon-portfolio-2024-05-01.json"
        )


class TestImportPortfolioJSON:
    """Test JSON import."""

    def test_round_trip(self, sample_items):
        exported = export_portfolio_json(Settings(currency="CHF", theme="light"), sample_items)
        items, settings = import_portfolio_json(exported, Settings())
        assert items == sample_items
        assert settings.currency == "CHF"
        assert settings.theme == "light"

    def test_only_currency_and_theme_are_taken(self):
        current = Settings(sort_by="pl", sort_dir="desc", last_refresh_at=99)
        content = json.dumps(
            {
                "settings": {
                    "currency": "USD",
                    "theme": "light",
                    "sortBy": "quantity",
                    "lastRefreshAt": 1,
                },
                "items": [],
            }
        )
        items, settings = import_portfolio_json(content, current)
        assert items == []
        assert settings.currency == "USD"
        assert settings.theme == "light"
        assert settings.sort_by == "pl"
        assert settings.sort_dir == "desc"
        assert settings.last_refresh_at == 99
        assert current.currency == "EUR"

    def test_unsupported_settings_values_ignored(self):
        content = json.dumps({"settings": {"currency": "JPY", "theme": 3}})
        _, settings = import_portfolio_json(content, Settings(currency="GBP"))
        assert settings.currency == "GBP"
        assert settings.theme == "dark"

    def test_legacy_bare_list(self):
        content = json.dumps([{"id": "a", "name": "Box", "quantity": 2}])
        current = Settings(currency="USD")
        items, settings = import_portfolio_json(content, current)
        assert [it.id for it in items] == ["a"]
        assert items[0].quantity == 2
        assert settings == current

    def test_missing_items_keeps_collection(self):
        items, settings = import_portfolio_json(
            json.dumps({"settings": {"currency": "USD"}}), Settings()
        )
        assert items is None
        assert settings.currency == "USD"

    def test_duplicate_ids_get_fresh_ids(self):
        content = json.dumps([{"id": "a", "name": "one"}, {"id": "a", "name": "two"}])
        items, _ = import_portfolio_json(content, Settings())
        assert items[0].id == "a"
        assert items[1].id != "a"
        assert items[1].name == "two"

    @pytest.mark.parametrize(
        "content",
        [
            "not json",
            "42",
            '"text"',
            '{"items": {"a": 1}}',
            '{"items": [1, 2]}',
            "[null]",
        ],
    )
    def test_invalid_documents(self, content):
        with pytest.raises(ImportFormatError, match="Invalid file format"):
            import_portfolio_json(content, Settings())

    def test_error_is_value_error_with_detail(self):
        with pytest.raises(ValueError) as excinfo:
            import_portfolio_json('{"items": "x"}', Settings())
        assert excinfo.value.detail == "items must be a list"
