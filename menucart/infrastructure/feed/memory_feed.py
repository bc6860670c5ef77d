from __future__ import annotations

import itertools
import logging
from typing import Any

from menucart.application.ports.change_feed import ChangeFeedPort, ChangeHandler, FeedSubscription


class _Subscription(FeedSubscription):
    def __init__(self, feed: InMemoryChangeFeed, token: int) -> None:
        self._feed = feed
        self._token = token

    def unsubscribe(self) -> None:
        self._feed._handlers.pop(self._token, None)


class InMemoryChangeFeed(ChangeFeedPort):
    """Process-local feed; the catalog webhook publishes into it."""

    def __init__(self) -> None:
        self._handlers: dict[int, ChangeHandler] = {}
        self._tokens = itertools.count(1)
        self._logger = logging.getLogger(__name__)

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def subscribe(self, handler: ChangeHandler) -> FeedSubscription:
        token = next(self._tokens)
        self._handlers[token] = handler
        return _Subscription(self, token)

    def publish(self, payload: Any = None) -> int:
        """Deliver payload to current subscribers. Returns how many were notified."""
        delivered = 0
        for token, handler in list(self._handlers.items()):
            if token not in self._handlers:
                continue
            try:
                handler(payload)
                delivered += 1
            except Exception:
                self._logger.exception("Change handler failed")
        self._logger.info("Catalog change published", extra={"subscribers": delivered})
        return delivered
