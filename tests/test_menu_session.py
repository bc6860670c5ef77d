"""
Tests for the browsing session that ties cart, mirror and view together.
"""

from __future__ import annotations

import asyncio

import pytest

from menucart.application.use_cases.cart_store import CART_STORAGE_KEY, CartStore
from menucart.application.use_cases.catalog_mirror import CatalogMirror
from menucart.application.use_cases.menu_session import MenuSession
from menucart.domain.entities.catalog_item import CatalogItem
from menucart.infrastructure.catalog.mock_catalog import MockCatalogSource
from menucart.infrastructure.feed.memory_feed import InMemoryChangeFeed
from menucart.infrastructure.store.memory_store import MemoryKeyValueStore

CATEGORIES = ["Makanan Utama", "Minuman", "Dessert"]


def _session(
    source: MockCatalogSource | None = None,
    storage: MemoryKeyValueStore | None = None,
    feed: InMemoryChangeFeed | None = None,
) -> MenuSession:
    mirror = CatalogMirror(source or MockCatalogSource(), feed or InMemoryChangeFeed())
    cart = CartStore(storage or MemoryKeyValueStore())
    return MenuSession(mirror=mirror, cart=cart, categories=CATEGORIES)


@pytest.mark.asyncio
async def test_start_loads_catalog_and_restores_cart():
    storage = MemoryKeyValueStore({CART_STORAGE_KEY: '{"4": 2, "1": 1}'})
    session = _session(storage=storage)

    await session.start()

    assert session.view().result_count == 7
    assert session.cart.is_restored is True
    assert session.cart_count() == 3
    assert session.startup_error is None
    await session.aclose()


@pytest.mark.asyncio
async def test_start_is_idempotent():
    source = MockCatalogSource()
    session = _session(source=source)
    await session.start()
    await session.start()
    assert source.fetch_count == 1
    await session.aclose()


@pytest.mark.asyncio
async def test_initial_load_failure_still_starts_session():
    source = MockCatalogSource()
    source.fail_next("offline")
    storage = MemoryKeyValueStore({CART_STORAGE_KEY: '{"2": 1}'})
    session = _session(source=source, storage=storage)

    await session.start()

    assert str(session.startup_error) == "offline"
    assert session.view().items == ()
    assert session.cart_count() == 1

    await session.refresh()
    assert session.view().result_count == 7
    await session.aclose()


@pytest.mark.asyncio
async def test_filters_and_search_precedence():
    session = _session()
    await session.start()

    view = session.set_category("Minuman")
    assert {i.category for i in view.items} == {"Minuman"}

    view = session.set_search("ayam")
    assert [i.name for i in view.items] == ["Ayam Bakar Madu", "Sate Ayam"]
    assert view.show_category_filter is False
    assert session.filter_state.category == "Minuman"

    view = session.clear_search()
    assert {i.category for i in view.items} == {"Minuman"}

    view = session.reset_category()
    assert view.result_count == 7
    await session.aclose()


@pytest.mark.asyncio
async def test_unknown_category_rejected():
    session = _session()
    await session.start()
    with pytest.raises(ValueError):
        session.set_category("Snack")
    assert session.categories == ["Semua", *CATEGORIES]
    await session.aclose()


@pytest.mark.asyncio
async def test_preview_leaves_session_filter_alone():
    session = _session()
    await session.start()

    preview = session.preview(category="Dessert")
    assert {i.category for i in preview.items} == {"Dessert"}
    assert session.filter_state.category == "Semua"
    assert session.view().result_count == 7
    await session.aclose()


@pytest.mark.asyncio
async def test_feed_change_updates_view():
    source = MockCatalogSource()
    feed = InMemoryChangeFeed()
    session = _session(source=source, feed=feed)
    await session.start()
    session.set_category("Dessert")

    source.set_items([
        CatalogItem(id=1, name="Nasi Goreng Spesial", category="Makanan Utama", price=27000),
        CatalogItem(id=20, name="Klepon", category="Dessert", price=8000),
    ])
    feed.publish({"eventType": "UPDATE"})
    for _ in range(20):
        await asyncio.sleep(0)

    assert [i.name for i in session.view().items] == ["Klepon"]
    await session.aclose()


@pytest.mark.asyncio
async def test_cart_survives_catalog_item_removal():
    source = MockCatalogSource()
    session = _session(source=source)
    await session.start()
    session.add_to_cart(7)

    source.set_items([])
    await session.refresh()

    assert session.cart.quantity(7) == 1
    assert session.view().items == ()
    await session.aclose()


@pytest.mark.asyncio
async def test_aclose_detaches_from_feed():
    feed = InMemoryChangeFeed()
    session = _session(feed=feed)
    await session.start()
    assert feed.subscriber_count == 1

    await session.aclose()
    assert feed.subscriber_count == 0
