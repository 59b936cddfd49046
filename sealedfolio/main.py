"""SealedFolio sidecar entry point.

Communicates with the UI process via stdin/stdout using
newline-delimited JSON messages.

Protocol:
    Request:  {"id": "uuid", "method": "string", "params": {}}
    Response: {"id": "uuid", "result": {}}
    Error:    {"id": "uuid", "error": {"message": "string"}}
"""

from __future__ import annotations

import json
import locale
import logging
import sys
import traceback
from functools import lru_cache
from typing import Any

import numpy as np

from sealedfolio import log_config
from sealedfolio.catalog.client import CatalogClient
from sealedfolio.db.connection import init_db
from sealedfolio.service import PortfolioService

logger = logging.getLogger(__name__)

# Method name -> PortfolioService method
METHODS: dict[str, str] = {
    # Portfolio
    "portfolio.report": "report",
    "portfolio.list": "list_items",
    "portfolio.save_item": "save_item",
    "portfolio.delete_item": "delete_item",
    # Market data
    "market.refresh": "refresh_prices",
    "market.refresh_status": "refresh_status",
    # Catalog
    "catalog.search": "search_catalog",
    # Settings
    "settings.get": "get_settings",
    "settings.update": "update_settings",
    # Export / import
    "export.portfolio_json": "export_json",
    "export.items_csv": "export_csv",
    "import.portfolio_json": "import_json",
}


class _NumpyEncoder(json.JSONEncoder):
    """JSON encoder that handles NumPy types."""

    def default(self, o: Any) -> Any:
        """Convert NumPy types to JSON-serializable Python types."""
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, np.integer):
            return int(o)
        if isinstance(o, np.floating):
            return float(o)
        return super().default(o)


@lru_cache(maxsize=1)
def get_service() -> PortfolioService:
    """Build the process-wide service on first use."""
    return PortfolioService(init_db(), CatalogClient())


def dispatch(
    method: str,
    params: dict[str, Any],
    service: PortfolioService | None = None,
) -> Any:
    """Route a method call to the appropriate handler.

    Args:
        method: The method name (e.g., "portfolio.report").
        params: The parameters for the method.
        service: Service to call; defaults to the process-wide one.

    Returns:
        The result of the method call.

    Raises:
        ValueError: If the method is not recognized.

    """
    if method not in METHODS:
        msg = f"Unknown method: {method}"
        raise ValueError(msg)
    handler = getattr(service or get_service(), METHODS[method])
    return handler(**params)


def main() -> None:
    """Run the sidecar message loop.

    Reads newline-delimited JSON from stdin, dispatches to handlers,
    and writes JSON responses to stdout. Runs indefinitely until
    stdin is closed.
    """
    log_config.setup()
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error:
        logger.warning("System collation locale unavailable, sorting by code point")
    for raw_line in sys.stdin:
        stripped = raw_line.strip()
        if not stripped:
            continue

        request: dict[str, Any] = {}
        try:
            request = json.loads(stripped)
            request_id = request.get("id", "unknown")
            method = request["method"]
            params = request.get("params", {})
            result = dispatch(method, params)
            response: dict[str, Any] = {"id": request_id, "result": result}
        except Exception as exc:  # noqa: BLE001 — dispatcher must catch all errors and return them as JSON
            request_id = (
                request.get("id", "unknown") if isinstance(request, dict) else "unknown"
            )
            response = {
                "id": request_id,
                "error": {
                    "message": str(exc),
                    "traceback": traceback.format_exc(),
                },
            }
        sys.stdout.write(json.dumps(response, cls=_NumpyEncoder) + "\n")
        sys.stdout.flush()


if __name__ == "__main__":
    main()
