from __future__ import annotations

from typing import Iterable

from menucart.domain.entities.catalog_item import CatalogItem
from menucart.domain.entities.catalog_view import CatalogViewResult
from menucart.domain.entities.filter_state import FilterState

SEARCH_SUGGESTIONS: tuple[str, ...] = ("Nasi", "Ayam", "Es", "Jus", "Bakar")


def _matches_search(item: CatalogItem, needle: str) -> bool:
    return needle in item.name.lower() or needle in item.category.lower()


def compute_visible(snapshot: Iterable[CatalogItem], filter_state: FilterState) -> tuple[CatalogItem, ...]:
    """Items to display, in snapshot order.

    A non-empty search text takes priority: the category selection is ignored
    while searching.
    """
    if filter_state.is_searching:
        needle = filter_state.search_text.lower()
        return tuple(item for item in snapshot if _matches_search(item, needle))

    if filter_state.is_wildcard:
        return tuple(snapshot)
    return tuple(item for item in snapshot if item.category == filter_state.category)


def build_view(snapshot: tuple[CatalogItem, ...], filter_state: FilterState) -> CatalogViewResult:
    items = compute_visible(snapshot, filter_state)
    searching = filter_state.is_searching

    active: list[tuple[str, str]] = []
    if searching:
        active.append(("search", filter_state.search_text))
    elif not filter_state.is_wildcard:
        active.append(("category", filter_state.category))

    empty_message = None
    if not items:
        if searching:
            empty_message = f'Tidak ada menu yang ditemukan untuk "{filter_state.search_text}"'
        else:
            empty_message = "Tidak ada menu dalam kategori ini"

    return CatalogViewResult(
        items=items,
        category=filter_state.category,
        search_text=filter_state.search_text,
        is_searching=searching,
        show_category_filter=not searching,
        active_filters=tuple(active),
        empty_message=empty_message,
        suggestions=SEARCH_SUGGESTIONS if not searching and snapshot else (),
    )


def format_price(price: int) -> str:
    """Rupiah with dot thousands separators, e.g. 25000 -> "Rp 25.000"."""
    return "Rp " + f"{price:,}".replace(",", ".")
