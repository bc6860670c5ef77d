from __future__ import annotations

import json
import logging
import re
from typing import Any

from menucart.application.exceptions import (
    CartPersistenceCorrupt,
    CartPersistenceError,
    StorageError,
)
from menucart.application.ports.key_value_store import KeyValueStorePort

CART_STORAGE_KEY = "restaurant_cart"

_ITEM_ID_RE = re.compile(r"-?[0-9]+")


def decode_cart(raw: str) -> dict[int, int]:
    """Parse a persisted cart value; raises CartPersistenceCorrupt on anything but {"<id>": <qty >= 1>}."""
    try:
        data: Any = json.loads(raw)
    except (ValueError, TypeError, RecursionError) as e:
        raise CartPersistenceCorrupt(f"Cart value is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise CartPersistenceCorrupt("Cart value must be a JSON object.")

    cart: dict[int, int] = {}
    for key, quantity in data.items():
        if not isinstance(key, str) or not _ITEM_ID_RE.fullmatch(key):
            raise CartPersistenceCorrupt(f"Cart key {key!r:.40} is not a decimal item id.")
        # bool is an int subclass; JSON true must not count as quantity 1
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise CartPersistenceCorrupt(f"Quantity for {key:.40} must be an integer.")
        if quantity < 1:
            raise CartPersistenceCorrupt(f"Quantity for {key:.40} must be positive.")
        try:
            item_id = int(key)
        except ValueError as e:
            raise CartPersistenceCorrupt(f"Cart key {key:.40} is out of range.") from e
        if item_id in cart:
            raise CartPersistenceCorrupt(f"Duplicate item id {item_id}.")
        cart[item_id] = quantity
    return cart


def encode_cart(cart: dict[int, int]) -> str:
    return json.dumps({str(item_id): quantity for item_id, quantity in cart.items()})


class CartStore:
    """
    Quantity-by-item-id cart backed by one key-value slot.

    Every mutation writes the whole mapping before returning. A failed write
    rolls the in-memory mapping back and raises CartPersistenceError, so memory
    and storage never disagree. No present id ever holds a quantity below 1.
    """

    def __init__(self, storage: KeyValueStorePort, key: str = CART_STORAGE_KEY) -> None:
        self._storage = storage
        self._key = key
        self._cart: dict[int, int] = {}
        self._restored = False
        self._logger = logging.getLogger(__name__)

    @property
    def is_restored(self) -> bool:
        return self._restored

    def restore(self) -> dict[int, int]:
        """Load the persisted cart. Absent, unreadable or corrupt values yield an empty cart."""
        try:
            raw = self._storage.get(self._key)
        except StorageError as e:
            self._logger.warning(
                "Cart storage unreadable, starting with empty cart",
                extra={"key": self._key, "error": str(e)},
            )
            raw = None

        if raw is None:
            self._cart = {}
        else:
            try:
                self._cart = decode_cart(raw)
            except CartPersistenceCorrupt as e:
                self._logger.warning(
                    "Persisted cart is corrupt, starting with empty cart",
                    extra={"key": self._key, "reason": str(e)},
                )
                self._cart = {}

        self._restored = True
        self._logger.info("Cart restored", extra={"item_count": self.total_count()})
        return dict(self._cart)

    def add(self, item_id: int) -> int:
        previous = dict(self._cart)
        quantity = self._cart.get(item_id, 0) + 1
        self._cart[item_id] = quantity
        self._persist(previous)
        self._logger.debug("Cart add", extra={"item_id": item_id, "quantity": quantity})
        return quantity

    def remove(self, item_id: int) -> int:
        current = self._cart.get(item_id)
        if current is None:
            return 0

        previous = dict(self._cart)
        if current > 1:
            self._cart[item_id] = current - 1
        else:
            del self._cart[item_id]
        self._persist(previous)

        quantity = self._cart.get(item_id, 0)
        self._logger.debug("Cart remove", extra={"item_id": item_id, "quantity": quantity})
        return quantity

    def quantity(self, item_id: int) -> int:
        return self._cart.get(item_id, 0)

    def items(self) -> dict[int, int]:
        return dict(self._cart)

    def total_count(self) -> int:
        return sum(self._cart.values())

    def _persist(self, previous: dict[int, int]) -> None:
        try:
            self._storage.set(self._key, encode_cart(self._cart))
        except StorageError as e:
            self._cart = previous
            self._logger.error("Cart write failed", extra={"key": self._key, "error": str(e)})
            raise CartPersistenceError(f"Could not persist cart: {e}") from e
