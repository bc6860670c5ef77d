"""
Tests for the catalog mirror: loads, feed-triggered refreshes and subscriptions.
"""

from __future__ import annotations

import asyncio

import pytest

from menucart.application.exceptions import CatalogFetchError
from menucart.application.ports.catalog_source import CatalogSourcePort
from menucart.application.use_cases.catalog_mirror import CatalogMirror
from menucart.domain.entities.catalog_item import CatalogItem
from menucart.infrastructure.catalog.mock_catalog import MockCatalogSource
from menucart.infrastructure.feed.memory_feed import InMemoryChangeFeed


def _items(*ids: int, suffix: str = "") -> list[CatalogItem]:
    return [CatalogItem(id=i, name=f"Item {i}{suffix}", category="Minuman", price=1000 * i) for i in ids]


class GatedSource(CatalogSourcePort):
    """Each fetch blocks until its gate is released, then returns the matching result."""

    def __init__(self, results: list[list[CatalogItem]]) -> None:
        self._results = results
        self.gates: list[asyncio.Event] = []
        self.calls = 0

    async def fetch_items(self) -> list[CatalogItem]:
        index = self.calls
        self.calls += 1
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        return list(self._results[index])


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_load_replaces_snapshot_and_notifies_once():
    source = MockCatalogSource(_items(1, 2))
    mirror = CatalogMirror(source)
    received = []
    mirror.subscribe_to_changes(received.append)

    snapshot = await mirror.load()

    assert [i.id for i in snapshot] == [1, 2]
    assert mirror.snapshot == snapshot
    assert received == [snapshot]
    assert mirror.last_loaded_at is not None


@pytest.mark.asyncio
async def test_failed_load_keeps_previous_snapshot():
    source = MockCatalogSource(_items(1, 2))
    mirror = CatalogMirror(source)
    received = []
    mirror.subscribe_to_changes(received.append)
    first = await mirror.load()

    source.fail_next("backend down")
    with pytest.raises(CatalogFetchError):
        await mirror.load()

    assert mirror.snapshot == first
    assert len(received) == 1
    assert str(mirror.last_error) == "backend down"

    await mirror.load()
    assert mirror.last_error is None


@pytest.mark.asyncio
async def test_feed_notification_triggers_refresh():
    source = MockCatalogSource(_items(1))
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(source, feed)
    received = []
    mirror.subscribe_to_changes(received.append)
    await mirror.load()

    source.set_items(_items(1, 2, 3))
    feed.publish({"eventType": "INSERT"})
    await _settle()

    assert [i.id for i in mirror.snapshot] == [1, 2, 3]
    assert len(received) == 2


@pytest.mark.asyncio
async def test_burst_of_notifications_coalesces():
    source = MockCatalogSource(_items(1))
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(source, feed)
    mirror.subscribe_to_changes(lambda snapshot: None)

    for _ in range(5):
        feed.publish()
    await _settle()

    assert source.fetch_count == 1


@pytest.mark.asyncio
async def test_notifications_during_fetch_queue_one_more_refresh():
    first, second = _items(1, 2), _items(3, 4, 5, suffix="b")
    source = GatedSource([first, second])
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(source, feed)
    seen: list[tuple[CatalogItem, ...]] = []
    mirror.subscribe_to_changes(seen.append)

    feed.publish()
    await _settle()
    assert source.calls == 1

    # arrive while the first fetch is in flight
    feed.publish()
    feed.publish()
    feed.publish()
    await _settle()
    assert source.calls == 1

    source.gates[0].set()
    await _settle()
    assert mirror.snapshot == tuple(first)
    assert source.calls == 2

    source.gates[1].set()
    await _settle()
    assert mirror.snapshot == tuple(second)
    assert source.calls == 2

    # every visible snapshot is exactly one fetch result
    assert seen == [tuple(first), tuple(second)]


@pytest.mark.asyncio
async def test_overlapping_loads_never_interleave():
    first, second = _items(1, 2), _items(7, 8, 9)
    source = GatedSource([first, second])
    mirror = CatalogMirror(source)

    load_a = asyncio.create_task(mirror.load())
    load_b = asyncio.create_task(mirror.load())
    await _settle()
    # the second load waits for the first to complete before fetching
    assert source.calls == 1

    source.gates[0].set()
    await load_a
    await _settle()
    assert mirror.snapshot == tuple(first)

    source.gates[1].set()
    await load_b
    assert mirror.snapshot == tuple(second)


@pytest.mark.asyncio
async def test_unsubscribed_handler_not_called_by_inflight_refresh():
    source = GatedSource([_items(1), _items(2)])
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(source, feed)
    removed: list = []
    kept: list = []
    handle = mirror.subscribe_to_changes(removed.append)
    mirror.subscribe_to_changes(kept.append)

    feed.publish()
    await _settle()
    handle.unsubscribe()

    source.gates[0].set()
    await _settle()

    assert mirror.snapshot == tuple(_items(1))
    assert removed == []
    assert len(kept) == 1


@pytest.mark.asyncio
async def test_last_unsubscribe_detaches_from_feed():
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(MockCatalogSource(_items(1)), feed)

    first = mirror.subscribe_to_changes(lambda s: None)
    second = mirror.subscribe_to_changes(lambda s: None)
    assert feed.subscriber_count == 1

    first.unsubscribe()
    assert mirror.is_subscribed_to_feed is True
    second.unsubscribe()
    assert mirror.is_subscribed_to_feed is False
    assert feed.subscriber_count == 0

    # double unsubscribe is harmless
    second.unsubscribe()


@pytest.mark.asyncio
async def test_feed_refresh_failure_is_recorded_not_raised():
    source = MockCatalogSource(_items(1))
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(source, feed)
    mirror.subscribe_to_changes(lambda s: None)
    await mirror.load()

    source.fail_next("timeout")
    feed.publish()
    await _settle()

    assert [i.id for i in mirror.snapshot] == [1]
    assert isinstance(mirror.last_error, CatalogFetchError)


@pytest.mark.asyncio
async def test_failing_handler_does_not_block_others():
    mirror = CatalogMirror(MockCatalogSource(_items(1)))
    received = []

    def broken(snapshot):
        raise RuntimeError("boom")

    mirror.subscribe_to_changes(broken)
    mirror.subscribe_to_changes(received.append)
    await mirror.load()

    assert len(received) == 1


@pytest.mark.asyncio
async def test_close_waits_for_inflight_refresh():
    source = GatedSource([_items(4)])
    feed = InMemoryChangeFeed()
    mirror = CatalogMirror(source, feed)
    mirror.subscribe_to_changes(lambda s: None)

    feed.publish()
    await _settle()
    closing = asyncio.create_task(mirror.close())
    await _settle()
    assert not closing.done()

    source.gates[0].set()
    await closing
    assert feed.subscriber_count == 0
    assert mirror.snapshot == tuple(_items(4))
