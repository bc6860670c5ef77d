from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from menucart.application.exceptions import CatalogContractError
from menucart.domain.entities.catalog_item import CatalogItem


class CatalogItemDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: StrictInt
    name: str
    category: str
    price: int = Field(ge=0)
    image_url: str | None = None
    description: str | None = None
    is_available: bool = True

    def to_entity(self) -> CatalogItem:
        return CatalogItem(
            id=self.id,
            name=self.name,
            category=self.category,
            price=self.price,
            image_url=self.image_url or None,
            description=self.description,
            is_available=self.is_available,
        )


def parse_catalog(payload: Any) -> list[CatalogItem]:
    """Validate a backend response; raises CatalogContractError on the wrong shape."""
    if not isinstance(payload, list):
        raise CatalogContractError("Catalog: expected a JSON list of items.")

    items: list[CatalogItem] = []
    seen: set[int] = set()
    for row in payload:
        try:
            item = CatalogItemDTO.model_validate(row).to_entity()
        except ValidationError as e:
            raise CatalogContractError(f"Catalog: invalid item {row!r}: {e}") from e
        if item.id in seen:
            raise CatalogContractError(f"Catalog: duplicate item id {item.id}.")
        seen.add(item.id)
        items.append(item)
    return items
