from __future__ import annotations

from abc import ABC, abstractmethod

from menucart.domain.entities.catalog_item import CatalogItem


class CatalogSourcePort(ABC):
    @abstractmethod
    async def fetch_items(self) -> list[CatalogItem]:
        """
        Fetch the full, ordered catalog.
        Raises CatalogFetchError (or CatalogContractError) when the load did not complete.
        """
        raise NotImplementedError

    async def aclose(self) -> None:
        return None
