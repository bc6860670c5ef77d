from __future__ import annotations

from dataclasses import dataclass

ALL_CATEGORY = "Semua"


@dataclass(frozen=True)
class FilterState:
    category: str = ALL_CATEGORY
    search_text: str = ""
    all_category: str = ALL_CATEGORY  # wildcard label

    @property
    def is_searching(self) -> bool:
        return self.search_text != ""

    @property
    def is_wildcard(self) -> bool:
        return self.category == self.all_category
