"""Tests for the /orders endpoints."""

import pytest

from conftest import auth_headers

SESSION = {"X-Session-Id": "checkout-session"}


@pytest.fixture
def placed(client, customer_headers, order_data):
    response = client.post("/orders", json=order_data, headers=customer_headers)
    assert response.status_code == 201
    return response.json()


class TestCreate:
    def test_create_order(self, placed):
        assert placed["order_number"].startswith("ORD")
        assert len(placed["order_number"]) == 13
        assert placed["order_status"] == "processing"
        assert placed["payment_status"] == "pending"
        assert (placed["subtotal"], placed["shipping"], placed["tax"], placed["total"]) == (200, 40, 10, 250)
        assert placed["items"][0]["line_total"] == 200
        assert placed["shipping_address"]["country"] == "India"

    def test_requires_authentication(self, client, order_data):
        assert client.post("/orders", json=order_data).status_code in (401, 403)

    def test_empty_lines_rejected(self, client, customer_headers, order_data):
        order_data["lines"] = []
        response = client.post("/orders", json=order_data, headers=customer_headers)
        assert response.status_code == 422
        assert client.get("/orders", headers=customer_headers).json()["total"] == 0

    def test_client_totals_ignored(self, client, customer_headers, order_data):
        order_data["total"] = 1
        order_data["subtotal"] = 1
        body = client.post("/orders", json=order_data, headers=customer_headers).json()
        assert body["total"] == 250

    def test_creation_is_audited(self, client, placed, admin_headers):
        logs = client.get("/logs", params={"action": "ORDER_CREATE"}, headers=admin_headers).json()
        assert logs["total"] == 1
        assert logs["items"][0]["meta"]["order_number"] == placed["order_number"]


class TestCheckoutFromCart:
    def test_checkout_places_order_and_clears_cart(self, client, customer_headers, order_data, make_product):
        phone = make_product(name="Phone", price=100)
        cable = make_product(name="Cable", price=5)
        client.post("/cart/items", json={"product_id": phone.id, "quantity": 2}, headers=SESSION)
        client.post("/cart/items", json={"product_id": cable.id, "quantity": 4}, headers=SESSION)

        payload = {k: order_data[k] for k in ("shipping_address", "payment_method", "notes")}
        response = client.post("/orders/checkout", json=payload, headers={**customer_headers, **SESSION})
        assert response.status_code == 201
        body = response.json()
        assert [(i["name"], i["quantity"]) for i in body["items"]] == [("Phone", 2), ("Cable", 4)]
        assert body["subtotal"] == 220
        assert body["total"] == body["subtotal"] + body["shipping"] + body["tax"]

        assert client.get("/cart", headers=SESSION).json()["items"] == []

    def test_empty_cart_cannot_be_checked_out(self, client, customer_headers, order_data):
        payload = {k: order_data[k] for k in ("shipping_address", "payment_method")}
        response = client.post("/orders/checkout", json=payload, headers={**customer_headers, **SESSION})
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"

    def test_failed_checkout_keeps_cart(self, client, customer_headers, order_data, product):
        client.post("/cart/items", json={"product_id": product.id}, headers=SESSION)
        payload = {k: order_data[k] for k in ("shipping_address", "payment_method")}
        payload["shipping_address"] = dict(payload["shipping_address"], city=" ")

        response = client.post("/orders/checkout", json=payload, headers={**customer_headers, **SESSION})
        assert response.status_code == 422
        assert len(client.get("/cart", headers=SESSION).json()["items"]) == 1


class TestRead:
    def test_list_and_get(self, client, customer_headers, placed):
        listing = client.get("/orders", headers=customer_headers).json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == placed["id"]

        detail = client.get(f"/orders/{placed['id']}", headers=customer_headers).json()
        assert detail["order_number"] == placed["order_number"]

        by_number = client.get(f"/orders/number/{placed['order_number']}", headers=customer_headers)
        assert by_number.json()["id"] == placed["id"]

    def test_other_customers_cannot_see_order(self, client, make_user, placed):
        stranger = auth_headers(make_user(email="stranger@example.com"))
        assert client.get(f"/orders/{placed['id']}", headers=stranger).status_code == 404
        assert client.get("/orders", headers=stranger).json()["total"] == 0

    def test_admin_can_see_any_order(self, client, admin_headers, placed):
        assert client.get(f"/orders/{placed['id']}", headers=admin_headers).status_code == 200

    def test_missing_order(self, client, customer_headers):
        response = client.get("/orders/9999", headers=customer_headers)
        assert response.status_code == 404


class TestTransitions:
    def test_cancel_twice(self, client, customer_headers, placed):
        first = client.post(f"/orders/{placed['id']}/cancel", headers=customer_headers)
        assert first.status_code == 200
        assert first.json()["order_status"] == "cancelled"
        assert first.json()["total"] == 250

        second = client.post(f"/orders/{placed['id']}/cancel", headers=customer_headers)
        assert second.status_code == 409
        assert second.json()["error"] == "InvalidTransition"

    def test_fulfillment_flow(self, client, admin_headers, customer_headers, placed):
        order_id = placed["id"]
        assert client.post(f"/orders/{order_id}/confirm", headers=admin_headers).json()["order_status"] == "confirmed"

        shipped = client.post(f"/orders/{order_id}/ship", json={"tracking_number": "TRK9"}, headers=admin_headers)
        assert shipped.status_code == 200
        assert shipped.json()["tracking_number"] == "TRK9"
        assert shipped.json()["estimated_delivery"] is not None

        cancel = client.post(f"/orders/{order_id}/cancel", headers=customer_headers)
        assert cancel.status_code == 409
        assert client.get(f"/orders/{order_id}", headers=customer_headers).json()["order_status"] == "shipped"

        delivered = client.post(f"/orders/{order_id}/deliver", headers=admin_headers)
        assert delivered.json()["order_status"] == "delivered"

    def test_ship_requires_confirmation(self, client, admin_headers, placed):
        response = client.post(f"/orders/{placed['id']}/ship", json={"tracking_number": "T"}, headers=admin_headers)
        assert response.status_code == 409

    def test_customers_cannot_fulfil(self, client, customer_headers, placed):
        assert client.post(f"/orders/{placed['id']}/confirm", headers=customer_headers).status_code == 403

    def test_payment_status(self, client, admin_headers, placed):
        url = f"/orders/{placed['id']}/payment-status"
        assert client.patch(url, json={"status": "refunded"}, headers=admin_headers).json()["payment_status"] == "refunded"

        bad = client.patch(url, json={"status": "paid"}, headers=admin_headers)
        assert bad.status_code == 400
        assert bad.json()["error"] == "ValidationError"

    def test_transition_on_missing_order(self, client, admin_headers):
        assert client.post("/orders/555/confirm", headers=admin_headers).status_code == 404


class TestPayment:
    def test_simulated_card_payment(self, client, customer_headers, placed):
        response = client.post(f"/orders/{placed['id']}/pay", json={}, headers=customer_headers)
        assert response.status_code == 200
        assert response.json()["payment_status"] == "completed"

    def test_declined_payment(self, client, customer_headers, placed):
        response = client.post(f"/orders/{placed['id']}/pay", json={"succeed": False}, headers=customer_headers)
        assert response.json()["payment_status"] == "failed"

    def test_cash_on_delivery(self, client, customer_headers, order_data):
        order_data["payment_method"] = "cod"
        order = client.post("/orders", json=order_data, headers=customer_headers).json()
        response = client.post(f"/orders/{order['id']}/pay", json={}, headers=customer_headers)
        assert response.status_code == 400


class TestHistory:
    def test_history_follows_transitions(self, client, admin_headers, customer_headers, placed):
        order_id = placed["id"]
        client.post(f"/orders/{order_id}/confirm", headers=admin_headers)
        client.post(f"/orders/{order_id}/ship", json={"tracking_number": "TRK1"}, headers=admin_headers)

        history = client.get(f"/orders/{order_id}/history", headers=customer_headers).json()
        assert [entry["action"] for entry in history] == ["ORDER_CREATE", "ORDER_STATUS_CHANGE", "ORDER_STATUS_CHANGE"]
        assert [entry["meta"].get("new") for entry in history[1:]] == ["confirmed", "shipped"]
        assert all(entry["order_id"] == order_id for entry in history)

    def test_history_is_private(self, client, make_user, placed):
        stranger = auth_headers(make_user(email="nosy@example.com"))
        assert client.get(f"/orders/{placed['id']}/history", headers=stranger).status_code == 404

    def test_logs_filter_by_order(self, client, admin_headers, customer_headers, order_data, placed):
        other = client.post("/orders", json=order_data, headers=customer_headers).json()
        client.post(f"/orders/{other['id']}/cancel", headers=customer_headers)

        logs = client.get("/logs", params={"order_id": other["id"]}, headers=admin_headers).json()
        assert logs["total"] == 2
        assert logs["items"][0]["action"] == "ORDER_CANCEL"
