# backend/services/cart.py
"""Session cart: line items with price snapshots and derived totals.

The cart never raises. Bad persisted state loads as an empty cart (or with
the bad lines dropped) and the problem is reported through ``Cart.warnings``.
"""
import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from services.storage import KeyValueStorage
from utils.money import compute_totals, line_total, to_money, to_quantity

logger = logging.getLogger(__name__)


def cart_key(session_id: str) -> str:
    return f"cart:{session_id}"


def product_snapshot(product) -> Dict:
    """Read id/name/price/image from a Product row or a plain mapping."""
    if isinstance(product, dict):
        get = product.get
    else:
        def get(field, default=None):
            return getattr(product, field, default)
    return {
        "product_id": int(get("id")),
        "name": get("name") or "",
        "price": to_money(get("price")),
        "image": get("image") or "",
    }


@dataclass
class CartLine:
    product_id: int
    name: str
    price: Decimal
    quantity: int
    image: str = ""

    @property
    def line_total(self) -> Decimal:
        return line_total(self.price, self.quantity)

    def to_dict(self) -> Dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
            "image": self.image,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "CartLine":
        quantity = data["quantity"]
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError(f"quantity must be an integer, got {quantity!r}")
        return cls(
            product_id=int(data["product_id"]),
            name=str(data.get("name") or ""),
            price=to_money(data["price"]),
            quantity=to_quantity(quantity),
            image=str(data.get("image") or ""),
        )


class Cart:
    def __init__(self, lines: Optional[List[CartLine]] = None,
                 storage: Optional[KeyValueStorage] = None, key: Optional[str] = None):
        self._lines: List[CartLine] = list(lines or [])
        self._storage = storage
        self._key = key
        self.warnings: List[str] = []

    @classmethod
    def load(cls, storage: KeyValueStorage, session_id: str) -> "Cart":
        key = cart_key(session_id)
        cart = cls(storage=storage, key=key)

        raw = storage.get(key)
        if raw is None:
            return cart
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            cart._warn(f"Stored cart {key} is not valid JSON; starting with an empty cart")
            return cart
        if not isinstance(data, list):
            cart._warn(f"Stored cart {key} is not a list of lines; starting with an empty cart")
            return cart

        for position, entry in enumerate(data):
            try:
                line = CartLine.from_dict(entry)
            except (KeyError, TypeError, ValueError) as e:
                cart._warn(f"Dropped malformed cart line {position}: {e}")
                continue
            existing = cart._find(line.product_id)
            if existing:
                existing.quantity += line.quantity
            else:
                cart._lines.append(line)
        return cart

    def _warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def _find(self, product_id) -> Optional[CartLine]:
        for line in self._lines:
            if line.product_id == product_id:
                return line
        return None

    def save(self):
        if self._storage is None or self._key is None:
            return
        # Best effort, like browser local storage: a failed write keeps the in-memory cart
        try:
            self._storage.set(self._key, json.dumps([line.to_dict() for line in self._lines]))
        except Exception as e:
            logger.warning("Failed to persist cart %s: %s", self._key, e)

    def add_item(self, product, quantity: int = 1):
        # Stock is advisory only; nothing is checked here
        try:
            snapshot = product_snapshot(product)
        except (TypeError, ValueError) as e:
            self._warn(f"Ignored product that cannot be added to the cart: {e}")
            return
        quantity = to_quantity(quantity)

        line = self._find(snapshot["product_id"])
        if line:
            line.quantity += quantity
        else:
            self._lines.append(CartLine(quantity=quantity, **snapshot))
        self.save()

    def remove_item(self, product_id):
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.product_id != product_id]
        if len(self._lines) != before:
            self.save()

    def update_quantity(self, product_id, quantity: int):
        line = self._find(product_id)
        if line is None:
            return
        line.quantity = to_quantity(quantity)
        self.save()

    def clear(self):
        self._lines = []
        self.save()

    def list(self) -> List[CartLine]:
        return list(self._lines)

    def totals(self) -> Dict:
        subtotal = sum((line.line_total for line in self._lines), Decimal("0"))
        totals = compute_totals(subtotal)
        totals["item_count"] = sum(line.quantity for line in self._lines)
        return totals

    def is_empty(self) -> bool:
        return not self._lines

    def to_order_lines(self) -> List[Dict]:
        return [
            {
                "product_id": line.product_id,
                "name": line.name,
                "price": line.price,
                "quantity": line.quantity,
                "image": line.image,
            }
            for line in self._lines
        ]

    def __len__(self):
        return len(self._lines)
