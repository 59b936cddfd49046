"""HTTP client for the product catalog proxy.

The proxy exposes two endpoints::

    GET {base}/api/products/search?q=<text>&limit=<n>
    GET {base}/api/products/<id>

Neither call raises to the caller: transport errors, non-2xx statuses
and unparseable bodies are logged and degrade to ``[]`` / ``None``.

"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from sealedfolio.catalog.normalize import extract_array
from sealedfolio.config import get_api_base, get_http_timeout

logger = logging.getLogger(__name__)

# Queries shorter than this are not sent to the catalog
MIN_QUERY_LENGTH = 3

USER_AGENT = "sealedfolio/0.1"


class CatalogClient:
    """Search and detail lookups against the catalog proxy.

    Args:
        base_url: Proxy base URL. Defaults to ``SEALEDFOLIO_API_BASE``.
        timeout: Request timeout in seconds. Defaults to
            ``SEALEDFOLIO_HTTP_TIMEOUT``.
        session: Optional ``requests.Session`` to reuse.

    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = (base_url or get_api_base()).rstrip("/")
        self.timeout = timeout if timeout is not None else get_http_timeout()
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and decode JSON; None on any failure."""
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Catalog request to %s failed: %s", url, exc)
            return None
        if not resp.ok:
            logger.warning(
                "Catalog request to %s returned %s %s",
                url,
                resp.status_code,
                resp.reason,
            )
            return None
        try:
            return resp.json()
        except ValueError:
            logger.warning("Catalog response from %s is not valid JSON", url)
            return None

    def search_products(self, query: str, limit: int = 10) -> list[Any]:
        """Search the catalog by free text.

        Args:
            query: Search text; fewer than 3 characters returns nothing.
            limit: Maximum number of results requested.

        Returns:
            List of raw product records, empty on any failure.

        """
        if not query or len(query) < MIN_QUERY_LENGTH:
            return []
        payload = self._get_json(
            f"{self.base_url}/api/products/search",
            params={"q": query, "limit": limit},
        )
        if payload is None:
            return []
        return extract_array(payload)

    def fetch_product_detail(self, product_id: str) -> Any:
        """Fetch one product by catalog id.

        Returns:
            The decoded body (a record, a wrapper or a list), or None on
            a non-success response or unparseable body.

        """
        if not product_id:
            return None
        url = f"{self.base_url}/api/products/{quote(str(product_id), safe='')}"
        return self._get_json(url)
