from __future__ import annotations

import logging

import httpx

from menucart.application.dto.catalog_item import parse_catalog
from menucart.application.exceptions import CatalogFetchError
from menucart.application.ports.catalog_source import CatalogSourcePort
from menucart.core.config import settings
from menucart.domain.entities.catalog_item import CatalogItem


class HttpCatalogSource(CatalogSourcePort):
    """
    Reads the menu table from a PostgREST-style endpoint.

    Raises:
        CatalogFetchError: networking failures and HTTP errors
        CatalogContractError: body is not a list of valid items
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        table: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or settings.CATALOG_BASE_URL or "").rstrip("/")
        self._api_key = api_key or settings.CATALOG_API_KEY
        self._table = table or settings.CATALOG_TABLE
        self._logger = logging.getLogger(__name__)

        if not self._base_url:
            raise ValueError("CATALOG_BASE_URL is required for the HTTP catalog")

        self._client = httpx.AsyncClient(
            timeout=timeout or settings.CATALOG_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def fetch_items(self) -> list[CatalogItem]:
        url = f"{self._base_url}/rest/v1/{self._table}"
        params = {"select": "*", "order": "category.asc,name.asc"}
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["apikey"] = self._api_key
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            resp = await self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            self._logger.error("Catalog request failed", extra={"error": str(e)})
            raise CatalogFetchError(f"Catalog request failed: {e}") from e

        if resp.status_code >= 400:
            self._logger.error(
                "Catalog fetch failed",
                extra={"status": resp.status_code, "error": resp.text[:200]},
            )
            raise CatalogFetchError(f"Catalog fetch returned HTTP {resp.status_code}")

        try:
            payload = resp.json()
        except ValueError as e:
            raise CatalogFetchError(f"Catalog response is not JSON: {e}") from e

        return parse_catalog(payload)

    async def aclose(self) -> None:
        await self._client.aclose()
