from __future__ import annotations

import asyncio
import hashlib
import itertools
import json
import logging
from dataclasses import asdict
from typing import Sequence

from menucart.application.exceptions import CatalogFetchError
from menucart.application.ports.catalog_source import CatalogSourcePort
from menucart.application.ports.change_feed import ChangeFeedPort, ChangeHandler, FeedSubscription
from menucart.domain.entities.catalog_item import CatalogItem

# Polling interval for re-reading the catalog (seconds)
DEFAULT_POLL_INTERVAL_SECS = 5.0


def catalog_fingerprint(items: Sequence[CatalogItem]) -> str:
    payload = json.dumps([asdict(item) for item in items], sort_keys=True, ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class _Subscription(FeedSubscription):
    def __init__(self, feed: PollingChangeFeed, token: int) -> None:
        self._feed = feed
        self._token = token

    def unsubscribe(self) -> None:
        self._feed._remove(self._token)


class PollingChangeFeed(ChangeFeedPort):
    """
    Turns a plain catalog source into a change feed by polling it and
    comparing fingerprints against the last observed snapshot. Until a
    snapshot has been observed, the first successful poll counts as a change.
    The poll task runs while at least one handler is subscribed.
    """

    def __init__(self, source: CatalogSourcePort, interval: float = DEFAULT_POLL_INTERVAL_SECS) -> None:
        self._source = source
        self._interval = interval
        self._handlers: dict[int, ChangeHandler] = {}
        self._tokens = itertools.count(1)
        self._fingerprint: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._logger = logging.getLogger(__name__)

    @property
    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, handler: ChangeHandler) -> FeedSubscription:
        token = next(self._tokens)
        self._handlers[token] = handler
        if not self.is_polling:
            self._task = asyncio.get_running_loop().create_task(self._poll_loop())
        return _Subscription(self, token)

    def _remove(self, token: int) -> None:
        self._handlers.pop(token, None)
        if not self._handlers and self._task is not None:
            self._task.cancel()
            self._task = None

    def observe(self, snapshot: Sequence[CatalogItem]) -> None:
        self._fingerprint = catalog_fingerprint(snapshot)

    async def poll_once(self) -> bool:
        """Fetch once; returns True and notifies handlers when the catalog changed."""
        try:
            items = await self._source.fetch_items()
        except CatalogFetchError as e:
            self._logger.warning("Catalog poll failed", extra={"error": str(e)})
            return False

        fingerprint = catalog_fingerprint(items)
        previous, self._fingerprint = self._fingerprint, fingerprint
        if previous == fingerprint:
            return False

        for token, handler in list(self._handlers.items()):
            if token not in self._handlers:
                continue
            try:
                handler({"fingerprint": fingerprint})
            except Exception:
                self._logger.exception("Change handler failed")
        return True

    async def _poll_loop(self) -> None:
        while self._handlers:
            await self.poll_once()
            await asyncio.sleep(self._interval)

    async def aclose(self) -> None:
        self._handlers.clear()
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
