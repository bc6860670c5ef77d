from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from menucart.domain.entities.catalog_item import CatalogItem

ChangeHandler = Callable[[Any], None]


class FeedSubscription(ABC):
    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering notifications. Safe to call more than once."""
        raise NotImplementedError


class ChangeFeedPort(ABC):
    @abstractmethod
    def subscribe(self, handler: ChangeHandler) -> FeedSubscription:
        """
        Register a handler for opaque "catalog may have changed" notifications.
        Handlers are called on the event loop thread.
        """
        raise NotImplementedError

    def observe(self, snapshot: Sequence[CatalogItem]) -> None:
        """Record the snapshot the subscriber now holds. Feeds that diff the catalog use it as their baseline."""
        return None

    async def aclose(self) -> None:
        return None
