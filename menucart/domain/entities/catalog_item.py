from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogItem:
    id: int
    name: str
    category: str
    price: int  # smallest currency unit
    image_url: str | None = None
    description: str | None = None
    is_available: bool = True


CatalogSnapshot = tuple[CatalogItem, ...]
