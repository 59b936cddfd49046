"""CSV export of portfolio holdings.

Generates a CSV report with metadata header lines (title, generation
time, currency) followed by one row per lot with its derived totals.

"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from sealedfolio.models import PortfolioItem
from sealedfolio.portfolio.aggregation import item_metrics

_FIELDNAMES = [
    "id",
    "name",
    "language",
    "purchaseDate",
    "quantity",
    "pricePaid",
    "marketPrice",
    "invested",
    "marketTotal",
    "pl",
    "marketUpdatedAt",
    "apiId",
    "cardmarketUrl",
]


def export_items_csv(
    items: Sequence[PortfolioItem],
    currency: str = "EUR",
    output_path: str | None = None,
) -> str:
    """Export lots to CSV format.

    Args:
        items: Items in the order they should appear.
        currency: Currency code noted in the header.
        output_path: File path to write. If None, returns CSV string.

    Returns:
        The CSV content as a string, or file path if output_path given.

    """
    output = io.StringIO()
    _write_metadata_header(output, "Holdings Export", extra=f"Currency: {currency}")

    writer = csv.DictWriter(output, fieldnames=_FIELDNAMES, extrasaction="ignore")
    writer.writeheader()
    for item in items:
        row = {**item.to_dict(), **item_metrics(item)}
        for key in ("pricePaid", "marketPrice", "invested", "marketTotal", "pl"):
            row[key] = f"{float(row[key]):.2f}"
        writer.writerow({k: "" if row.get(k) is None else row[k] for k in _FIELDNAMES})

    content = output.getvalue()
    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")
        return output_path
    return content


def _write_metadata_header(
    output: io.StringIO,
    title: str,
    extra: str = "",
) -> None:
    """Write metadata comment lines at the top of a CSV export.

    Args:
        output: StringIO buffer to write to.
        title: Export title.
        extra: Optional additional metadata line.

    """
    now = datetime.now(tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC")
    output.write(f"# {title}\n")
    output.write(f"# Generated: {now}\n")
    if extra:
        output.write(f"# {extra}\n")
