"""Tests for the wishlist aggregate and its endpoints."""

from services.wishlist import Wishlist, wishlist_key


def item(pid, price="10"):
    return {"id": pid, "name": f"Item {pid}", "price": price, "image": ""}


class TestWishlist:
    def test_add_and_contains(self, storage):
        wishlist = Wishlist(storage, 1)
        assert wishlist.add(item(1)) is True
        assert wishlist.contains(1)
        assert wishlist.count() == 1

    def test_duplicate_is_refused(self, storage):
        wishlist = Wishlist(storage, 1)
        wishlist.add(item(1))
        assert wishlist.add(item(1)) is False
        assert wishlist.count() == 1

    def test_persists_per_user(self, storage):
        Wishlist(storage, 1).add(item(1))
        assert Wishlist(storage, 1).contains(1)
        assert Wishlist(storage, 2).count() == 0

    def test_remove_and_clear(self, storage):
        wishlist = Wishlist(storage, 1)
        wishlist.add(item(1))
        wishlist.add(item(2))
        wishlist.remove(1)
        assert [i.product_id for i in wishlist.list()] == [2]
        wishlist.clear()
        assert Wishlist(storage, 1).count() == 0

    def test_malformed_state_starts_empty(self, storage):
        storage.set(wishlist_key(1), '{"oops": true}')
        wishlist = Wishlist(storage, 1)
        assert wishlist.count() == 0
        assert wishlist.warnings

    def test_stored_entries_are_coerced(self, storage):
        storage.set(wishlist_key(1), '[{"product_id": "7", "name": "Lamp", "price": 12.5}, {"product_id": "x", "price": "1"}]')
        wishlist = Wishlist(storage, 1)
        assert wishlist.contains(7)
        assert wishlist.list()[0].price == "12.50"
        assert len(wishlist.warnings) == 1

        wishlist.remove(7)
        assert wishlist.count() == 0


class TestWishlistApi:
    def test_requires_authentication(self, client):
        assert client.get("/wishlist").status_code in (401, 403)

    def test_add_list_remove(self, client, customer_headers, product):
        response = client.post(f"/wishlist/{product.id}", headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["items"][0]["price"] == 100.0

        assert client.post(f"/wishlist/{product.id}", headers=customer_headers).status_code == 409

        response = client.delete(f"/wishlist/{product.id}", headers=customer_headers)
        assert response.json() == {"items": [], "count": 0}

    def test_unknown_product(self, client, customer_headers):
        response = client.post("/wishlist/999", headers=customer_headers)
        assert response.status_code == 404
        assert response.json()["error"] == "NotFound"
