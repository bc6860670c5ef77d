from __future__ import annotations

from dataclasses import dataclass, field

from menucart.domain.entities.catalog_item import CatalogItem


@dataclass(frozen=True)
class CatalogViewResult:
    items: tuple[CatalogItem, ...]
    category: str
    search_text: str
    is_searching: bool
    show_category_filter: bool
    active_filters: tuple[tuple[str, str], ...] = ()
    empty_message: str | None = None
    suggestions: tuple[str, ...] = field(default_factory=tuple)

    @property
    def result_count(self) -> int:
        return len(self.items)
