"""Tests for the session cart."""

import json
from decimal import Decimal

import pytest

from services.cart import Cart, cart_key
from services.storage import InMemoryStorage


def catalog_item(pid=1, price="100", name="Headphones", image="h.png"):
    return {"id": pid, "name": name, "price": price, "image": image, "stock": 3, "category": "Electronics"}


@pytest.fixture
def cart(storage):
    return Cart.load(storage, "session-1")


class TestMutations:
    def test_same_product_merges_into_one_line(self, cart):
        cart.add_item(catalog_item(), 1)
        cart.add_item(catalog_item(), 1)
        lines = cart.list()
        assert len(lines) == 1
        assert lines[0].quantity == 2

    def test_quantities_add_up(self, cart):
        cart.add_item(catalog_item(), 3)
        cart.add_item(catalog_item(), 4)
        assert cart.list()[0].quantity == 7

    def test_stock_is_not_enforced(self, cart):
        cart.add_item(catalog_item(), 50)
        assert cart.list()[0].quantity == 50

    def test_lines_keep_insertion_order(self, cart):
        cart.add_item(catalog_item(2, name="B"))
        cart.add_item(catalog_item(1, name="A"))
        assert [line.product_id for line in cart.list()] == [2, 1]

    def test_update_quantity_floors_at_one(self, cart):
        cart.add_item(catalog_item(), 3)
        cart.update_quantity(1, 0)
        assert cart.list()[0].quantity == 1
        cart.update_quantity(1, -4)
        assert cart.list()[0].quantity == 1

    def test_update_unknown_product_is_noop(self, cart):
        cart.add_item(catalog_item())
        cart.update_quantity(99, 5)
        assert [(l.product_id, l.quantity) for l in cart.list()] == [(1, 1)]

    def test_remove_item(self, cart):
        cart.add_item(catalog_item(1))
        cart.add_item(catalog_item(2))
        cart.remove_item(1)
        assert [line.product_id for line in cart.list()] == [2]

    def test_remove_missing_is_noop(self, cart):
        cart.add_item(catalog_item(1))
        cart.remove_item(42)
        assert len(cart) == 1

    def test_clear(self, cart):
        cart.add_item(catalog_item(1))
        cart.add_item(catalog_item(2))
        cart.clear()
        assert cart.is_empty()
        assert cart.totals()["total"] == 0

    def test_price_is_snapshotted(self, cart):
        item = catalog_item(price="100")
        cart.add_item(item)
        item["price"] = "250"
        cart.add_item(item)
        assert cart.list()[0].price == Decimal("100.00")

    def test_accepts_orm_product(self, cart, product):
        cart.add_item(product, 2)
        line = cart.list()[0]
        assert line.product_id == product.id
        assert line.name == "Wireless Headphones"
        assert line.price == Decimal("100.00")

    def test_unusable_product_is_ignored_with_warning(self, cart):
        cart.add_item({"id": None, "name": "Broken", "price": "1"})
        assert cart.is_empty()
        assert cart.warnings


class TestTotals:
    def test_reference_basket(self, cart):
        cart.add_item(catalog_item(price=100), 2)
        totals = cart.totals()
        assert totals["subtotal"] == 200
        assert totals["shipping"] == 40
        assert totals["tax"] == 10
        assert totals["total"] == 250
        assert totals["item_count"] == 2

    def test_total_is_sum_of_parts(self, cart):
        cart.add_item(catalog_item(1, price="19.99"), 3)
        cart.add_item(catalog_item(2, price="0.35"), 7)
        cart.add_item(catalog_item(3, price="1299.99"), 1)
        totals = cart.totals()
        assert totals["total"] == totals["subtotal"] + totals["shipping"] + totals["tax"]
        assert totals["item_count"] == 11

    def test_empty_cart(self, cart):
        assert cart.totals() == {
            "subtotal": 0, "shipping": 0, "tax": 0, "total": 0, "item_count": 0,
        }

    def test_totals_do_not_mutate(self, cart):
        cart.add_item(catalog_item(), 2)
        cart.totals()
        cart.totals()
        assert cart.list()[0].quantity == 2


class TestPersistence:
    def test_round_trip_through_storage(self, storage):
        cart = Cart.load(storage, "s")
        cart.add_item(catalog_item(1, price="12.50"), 2)
        cart.add_item(catalog_item(2), 1)

        reloaded = Cart.load(storage, "s")
        assert [(l.product_id, l.quantity, l.price) for l in reloaded.list()] == [
            (1, 2, Decimal("12.50")),
            (2, 1, Decimal("100.00")),
        ]
        assert reloaded.warnings == []

    def test_sessions_are_isolated(self, storage):
        Cart.load(storage, "a").add_item(catalog_item())
        assert Cart.load(storage, "b").is_empty()

    def test_non_list_state_loads_empty_with_warning(self, storage):
        storage.set(cart_key("s"), json.dumps({"items": []}))
        cart = Cart.load(storage, "s")
        assert cart.is_empty()
        assert len(cart.warnings) == 1

    def test_invalid_json_loads_empty_with_warning(self, storage):
        storage.set(cart_key("s"), "{not json")
        cart = Cart.load(storage, "s")
        assert cart.is_empty()
        assert cart.warnings

    def test_malformed_lines_are_dropped(self, storage):
        storage.set(cart_key("s"), json.dumps([
            {"product_id": 1, "name": "Ok", "price": "5.00", "quantity": 2},
            {"product_id": 2, "name": "No price", "quantity": 1},
            {"product_id": 3, "name": "Bad qty", "price": "1", "quantity": "many"},
            "garbage",
        ]))
        cart = Cart.load(storage, "s")
        assert [line.product_id for line in cart.list()] == [1]
        assert len(cart.warnings) == 3

    def test_duplicate_stored_lines_are_merged(self, storage):
        storage.set(cart_key("s"), json.dumps([
            {"product_id": 1, "name": "A", "price": "5", "quantity": 1},
            {"product_id": 1, "name": "A", "price": "5", "quantity": 2},
        ]))
        cart = Cart.load(storage, "s")
        assert len(cart) == 1
        assert cart.list()[0].quantity == 3

    def test_failed_save_keeps_cart_usable(self):
        class BrokenStorage(InMemoryStorage):
            def set(self, key, value):
                raise OSError("disk full")

        cart = Cart.load(BrokenStorage(), "s")
        cart.add_item(catalog_item(), 2)
        assert cart.totals()["item_count"] == 2

    def test_to_order_lines(self, cart):
        cart.add_item(catalog_item(1, price="10"), 3)
        assert cart.to_order_lines() == [
            {"product_id": 1, "name": "Headphones", "price": Decimal("10.00"), "quantity": 3, "image": "h.png"},
        ]
