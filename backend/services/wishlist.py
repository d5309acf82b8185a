# backend/services/wishlist.py
import json
import logging
from dataclasses import dataclass, asdict
from typing import List

from services.cart import product_snapshot
from services.storage import KeyValueStorage
from utils.money import to_money

logger = logging.getLogger(__name__)


def wishlist_key(user_id) -> str:
    return f"wishlist:{user_id}"


@dataclass
class WishlistItem:
    product_id: int
    name: str
    price: str
    image: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "WishlistItem":
        return cls(
            product_id=int(data["product_id"]),
            name=str(data.get("name") or ""),
            price=str(to_money(data["price"])),
            image=str(data.get("image") or ""),
        )


class Wishlist:
    """Per-user list of saved products, persisted like the cart."""

    def __init__(self, storage: KeyValueStorage, user_id):
        self._storage = storage
        self._key = wishlist_key(user_id)
        self._items: List[WishlistItem] = []
        self.warnings: List[str] = []
        self._load()

    def _load(self):
        raw = self._storage.get(self._key)
        if raw is None:
            return
        try:
            data = json.loads(raw)
        except (TypeError, ValueError) as e:
            self._warn(f"Stored wishlist {self._key} is not valid JSON ({e}); starting empty")
            return
        if not isinstance(data, list):
            self._warn(f"Stored wishlist {self._key} is not a list; starting empty")
            return

        for position, entry in enumerate(data):
            try:
                item = WishlistItem.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                self._warn(f"Dropped malformed wishlist entry {position}: {e}")
                continue
            if not self.contains(item.product_id):
                self._items.append(item)

    def _warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def _save(self):
        try:
            self._storage.set(self._key, json.dumps([asdict(item) for item in self._items]))
        except Exception as e:
            logger.warning("Failed to persist wishlist %s: %s", self._key, e)

    def add(self, product) -> bool:
        """Add a product; returns False when it is already saved."""
        snapshot = product_snapshot(product)
        if self.contains(snapshot["product_id"]):
            return False
        self._items.append(WishlistItem(
            product_id=snapshot["product_id"],
            name=snapshot["name"],
            price=str(snapshot["price"]),
            image=snapshot["image"],
        ))
        self._save()
        return True

    def remove(self, product_id):
        self._items = [item for item in self._items if item.product_id != product_id]
        self._save()

    def contains(self, product_id) -> bool:
        return any(item.product_id == product_id for item in self._items)

    def clear(self):
        self._items = []
        self._save()

    def list(self) -> List[WishlistItem]:
        return list(self._items)

    def count(self) -> int:
        return len(self._items)
