from __future__ import annotations

import asyncio
import logging
from dataclasses import replace

from menucart.application.exceptions import CatalogFetchError
from menucart.application.use_cases.cart_store import CartStore
from menucart.application.use_cases.catalog_mirror import CatalogMirror, MirrorSubscription
from menucart.application.use_cases.catalog_view import build_view
from menucart.domain.entities.catalog_item import CatalogSnapshot
from menucart.domain.entities.catalog_view import CatalogViewResult
from menucart.domain.entities.filter_state import ALL_CATEGORY, FilterState


class MenuSession:
    def __init__(
        self,
        mirror: CatalogMirror,
        cart: CartStore,
        categories: list[str],
        all_category: str = ALL_CATEGORY,
    ) -> None:
        self._mirror = mirror
        self._cart = cart
        self._categories = [all_category, *[c for c in categories if c != all_category]]
        self._filter = FilterState(category=all_category, all_category=all_category)
        self._subscription: MirrorSubscription | None = None
        self._view: CatalogViewResult | None = None
        self._started = False
        self.startup_error: CatalogFetchError | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def mirror(self) -> CatalogMirror:
        return self._mirror

    @property
    def cart(self) -> CartStore:
        return self._cart

    @property
    def categories(self) -> list[str]:
        return list(self._categories)

    @property
    def filter_state(self) -> FilterState:
        return self._filter

    @property
    def is_loading(self) -> bool:
        return self._mirror.is_loading

    async def start(self) -> None:
        if self._started:
            return
        self._started = True

        load_result, restore_result = await asyncio.gather(
            self._mirror.load(),
            asyncio.to_thread(self._cart.restore),
            return_exceptions=True,
        )
        if isinstance(restore_result, BaseException):
            raise restore_result
        if isinstance(load_result, CatalogFetchError):
            self.startup_error = load_result
            self._logger.warning("Initial catalog load failed", extra={"error": str(load_result)})
        elif isinstance(load_result, BaseException):
            raise load_result

        self._subscription = self._mirror.subscribe_to_changes(self._on_snapshot)
        self._recompute()

    async def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        await self._mirror.close()
        self._started = False

    async def aclose(self) -> None:
        """Stop the session and release the feed and catalog client."""
        await self.stop()
        if self._mirror.feed is not None:
            await self._mirror.feed.aclose()
        await self._mirror.source.aclose()

    async def refresh(self) -> CatalogSnapshot:
        snapshot = await self._mirror.load()
        self._recompute()
        return snapshot

    def set_category(self, category: str) -> CatalogViewResult:
        if category not in self._categories:
            raise ValueError(f"Unknown category: {category}")
        self._filter = replace(self._filter, category=category)
        return self._recompute()

    def reset_category(self) -> CatalogViewResult:
        return self.set_category(self._filter.all_category)

    def set_search(self, text: str) -> CatalogViewResult:
        self._filter = replace(self._filter, search_text=text)
        return self._recompute()

    def clear_search(self) -> CatalogViewResult:
        return self.set_search("")

    def add_to_cart(self, item_id: int) -> int:
        return self._cart.add(item_id)

    def remove_from_cart(self, item_id: int) -> int:
        return self._cart.remove(item_id)

    def cart_count(self) -> int:
        return self._cart.total_count()

    def view(self) -> CatalogViewResult:
        if self._view is None:
            return self._recompute()
        return self._view

    def preview(self, category: str | None = None, search_text: str | None = None) -> CatalogViewResult:
        """View for a one-off filter, leaving the session filter untouched."""
        state = self._filter
        if category is not None:
            if category not in self._categories:
                raise ValueError(f"Unknown category: {category}")
            state = replace(state, category=category)
        if search_text is not None:
            state = replace(state, search_text=search_text)
        return build_view(self._mirror.snapshot, state)

    def _on_snapshot(self, snapshot: CatalogSnapshot) -> None:
        self._view = build_view(snapshot, self._filter)

    def _recompute(self) -> CatalogViewResult:
        self._view = build_view(self._mirror.snapshot, self._filter)
        return self._view
