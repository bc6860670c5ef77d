from __future__ import annotations

import logging

from menucart.application.exceptions import CatalogFetchError
from menucart.application.ports.catalog_source import CatalogSourcePort
from menucart.domain.entities.catalog_item import CatalogItem

DEFAULT_MENU: tuple[CatalogItem, ...] = (
    CatalogItem(id=1, name="Nasi Goreng Spesial", category="Makanan Utama", price=25000),
    CatalogItem(id=2, name="Ayam Bakar Madu", category="Makanan Utama", price=32000),
    CatalogItem(id=3, name="Sate Ayam", category="Makanan Utama", price=28000),
    CatalogItem(id=4, name="Es Teh Manis", category="Minuman", price=5000),
    CatalogItem(id=5, name="Jus Alpukat", category="Minuman", price=15000),
    CatalogItem(id=6, name="Es Campur", category="Dessert", price=12000),
    CatalogItem(id=7, name="Pisang Bakar Keju", category="Dessert", price=14000),
)


class MockCatalogSource(CatalogSourcePort):
    def __init__(self, items: list[CatalogItem] | None = None) -> None:
        self._items = list(DEFAULT_MENU if items is None else items)
        self._fail_with: str | None = None
        self.fetch_count = 0
        self._logger = logging.getLogger(__name__)

    def set_items(self, items: list[CatalogItem]) -> None:
        self._items = list(items)

    def fail_next(self, reason: str = "mock catalog unavailable") -> None:
        self._fail_with = reason

    async def fetch_items(self) -> list[CatalogItem]:
        self.fetch_count += 1
        if self._fail_with is not None:
            reason, self._fail_with = self._fail_with, None
            raise CatalogFetchError(reason)
        self._logger.info("Mock catalog fetch", extra={"item_count": len(self._items)})
        return list(self._items)
