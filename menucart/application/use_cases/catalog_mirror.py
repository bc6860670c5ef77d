from __future__ import annotations

import asyncio
import itertools
import logging
import time
from typing import Any, Callable

from menucart.application.exceptions import CatalogFetchError
from menucart.application.ports.catalog_source import CatalogSourcePort
from menucart.application.ports.change_feed import ChangeFeedPort, FeedSubscription
from menucart.domain.entities.catalog_item import CatalogSnapshot

SnapshotHandler = Callable[[CatalogSnapshot], None]


class MirrorSubscription:
    """Handle returned by CatalogMirror.subscribe_to_changes."""

    def __init__(self, mirror: CatalogMirror, token: int) -> None:
        self._mirror = mirror
        self.token = token

    def unsubscribe(self) -> None:
        self._mirror.unsubscribe(self)


class CatalogMirror:
    """
    Last-known-good copy of the remote catalog.

    Contract:
    - load() replaces the snapshot wholesale and notifies handlers exactly once per replacement
    - a failed load keeps the previous snapshot and raises CatalogFetchError
    - loads never interleave; feed notifications coalesce into at most one queued refresh
    """

    def __init__(self, source: CatalogSourcePort, feed: ChangeFeedPort | None = None) -> None:
        self._source = source
        self._feed = feed
        self._snapshot: CatalogSnapshot = ()
        self._handlers: dict[int, SnapshotHandler] = {}
        self._tokens = itertools.count(1)
        self._feed_subscription: FeedSubscription | None = None
        self._lock = asyncio.Lock()
        self._refresh_queued = False
        self._tasks: set[asyncio.Task[None]] = set()
        self._loading = False
        self.last_loaded_at: float | None = None
        self.last_error: CatalogFetchError | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def source(self) -> CatalogSourcePort:
        return self._source

    @property
    def feed(self) -> ChangeFeedPort | None:
        return self._feed

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_subscribed_to_feed(self) -> bool:
        return self._feed_subscription is not None

    async def load(self) -> CatalogSnapshot:
        async with self._lock:
            return await self._load_locked()

    async def _load_locked(self) -> CatalogSnapshot:
        self._loading = True
        try:
            items = await self._source.fetch_items()
        except CatalogFetchError as e:
            self.last_error = e
            self._logger.warning("Catalog load failed, keeping previous snapshot", extra={"error": str(e)})
            raise
        finally:
            self._loading = False

        self._snapshot = tuple(items)
        self.last_error = None
        self.last_loaded_at = time.time()
        if self._feed is not None:
            self._feed.observe(self._snapshot)
        self._logger.info("Catalog snapshot replaced", extra={"item_count": len(self._snapshot)})
        self._dispatch(self._snapshot)
        return self._snapshot

    def subscribe_to_changes(self, handler: SnapshotHandler) -> MirrorSubscription:
        token = next(self._tokens)
        self._handlers[token] = handler
        if self._feed is not None and self._feed_subscription is None:
            self._feed_subscription = self._feed.subscribe(self._on_feed_notification)
            self._logger.info("Subscribed to catalog change feed")
        return MirrorSubscription(self, token)

    def unsubscribe(self, handle: MirrorSubscription) -> None:
        if self._handlers.pop(handle.token, None) is None:
            return
        if not self._handlers:
            self._detach_feed()

    async def close(self) -> None:
        self._handlers.clear()
        self._detach_feed()
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _detach_feed(self) -> None:
        if self._feed_subscription is not None:
            self._feed_subscription.unsubscribe()
            self._feed_subscription = None
            self._logger.info("Unsubscribed from catalog change feed")

    def _on_feed_notification(self, payload: Any) -> None:
        # payload is opaque; any notification means "re-fetch"
        self._logger.debug("Catalog change notification received")
        if self._refresh_queued:
            return
        self._refresh_queued = True
        task = asyncio.get_running_loop().create_task(self._refresh_from_feed())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _refresh_from_feed(self) -> None:
        async with self._lock:
            # later notifications must queue a new refresh, this one is starting now
            self._refresh_queued = False
            try:
                await self._load_locked()
            except CatalogFetchError:
                return

    def _dispatch(self, snapshot: CatalogSnapshot) -> None:
        for token, handler in list(self._handlers.items()):
            if token not in self._handlers:
                continue
            try:
                handler(snapshot)
            except Exception:
                self._logger.exception("Snapshot handler failed", extra={"reason": f"handler {token}"})
