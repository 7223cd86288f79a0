"""Integration tests for the order endpoints."""

from protean import current_domain
from storefront.catalogue.product import Product

ADMIN = {"Authorization": "Bearer tok-admin"}
ASHA = {"Authorization": "Bearer tok-asha"}
RAVI = {"Authorization": "Bearer tok-ravi"}


def _stock(product_id):
    return current_domain.repository_for(Product).get(str(product_id)).stock


def _place(client, product, address, quantity=1, headers=ASHA):
    return client.post(
        "/orders",
        json={
            "items": [{"product_id": str(product.id), "quantity": quantity}],
            "shipping_address": address,
        },
        headers=headers,
    )


class TestPlaceOrderEndpoint:
    def test_place_order_from_cart(self, client, make_product, address):
        product = make_product(price=200.0, stock=5)
        client.post("/cart", json={"product_id": str(product.id), "quantity": 2}, headers=ASHA)

        response = _place(client, product, address, quantity=2)

        assert response.status_code == 201
        body = response.json()
        assert body["order_number"].startswith("PAP-")
        assert body["status"] == "pending"
        assert body["subtotal"] == 400.0
        assert body["shipping_cost"] == 50.0
        assert body["total"] == 450.0
        assert _stock(product.id) == 3
        assert client.get("/cart", headers=ASHA).json()["items"] == []

    def test_insufficient_stock(self, client, make_product, address):
        product = make_product(stock=1)

        response = _place(client, product, address, quantity=2)

        assert response.status_code == 409
        assert response.json()["product_id"] == str(product.id)
        assert _stock(product.id) == 1

    def test_incomplete_address(self, client, make_product, address):
        product = make_product()
        response = _place(client, product, {**address, "city": "", "postal_code": ""})

        assert response.status_code == 400

    def test_empty_order(self, client, address):
        response = client.post("/orders", json={"items": [], "shipping_address": address}, headers=ASHA)
        assert response.status_code == 400

    def test_anonymous_cannot_order(self, client, make_product, address):
        product = make_product()
        response = _place(client, product, address, headers={})
        assert response.status_code == 401


class TestOrderQueries:
    def test_list_is_owner_scoped(self, client, make_product, address):
        product = make_product(stock=20)
        _place(client, product, address)
        _place(client, product, address)
        _place(client, product, address, headers=RAVI)

        mine = client.get("/orders", headers=ASHA).json()
        everything = client.get("/orders", headers=ADMIN).json()

        assert mine["total"] == 2
        assert everything["total"] == 3

    def test_pagination(self, client, make_product, address):
        product = make_product(stock=20)
        for _ in range(3):
            _place(client, product, address)

        body = client.get("/orders?page=2&limit=2", headers=ASHA).json()

        assert len(body["orders"]) == 1
        assert body["pages"] == 2

    def test_other_users_order_is_not_found(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]

        assert client.get(f"/orders/{order_number}", headers=RAVI).status_code == 404
        assert client.get(f"/orders/{order_number}", headers=ASHA).status_code == 200
        assert client.get(f"/orders/{order_number}", headers=ADMIN).status_code == 200

    def test_public_tracking(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]

        response = client.get(f"/orders/track/{order_number}")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "pending"
        assert body["progress"] == 10
        assert "email" not in body["shipping_address"]

    def test_tracking_unknown_order(self, client):
        assert client.get("/orders/track/PAP-00000000-000000").status_code == 404


class TestOrderAdministration:
    def test_admin_moves_order_forward(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]

        response = client.put(
            f"/orders/{order_number}",
            json={"status": "shipped", "tracking_number": "TRK-1", "carrier": "BlueDart"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "shipped"
        assert body["tracking_number"] == "TRK-1"
        assert body["status_history"][-1]["actor"] == "admin:admin-001"

    def test_backward_transition_is_unprocessable(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]
        client.put(f"/orders/{order_number}", json={"status": "shipped"}, headers=ADMIN)

        response = client.put(f"/orders/{order_number}", json={"status": "confirmed"}, headers=ADMIN)

        assert response.status_code == 422

    def test_admin_logs_failed_delivery_attempt(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]

        response = client.put(
            f"/orders/{order_number}",
            json={
                "status": "out_for_delivery",
                "current_location": "HSR Layout",
                "delivery_attempt": {"status": "failed", "notes": "Customer unavailable"},
            },
            headers=ADMIN,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["current_location"] == "HSR Layout"
        assert body["status_history"][-1]["location"] == "HSR Layout"
        assert [a["status"] for a in body["delivery_attempts"]] == ["failed"]
        tracking = client.get(f"/orders/track/{order_number}").json()
        assert tracking["delivery_attempts"][0]["notes"] == "Customer unavailable"

    def test_delivery_attempt_on_pending_order_is_unprocessable(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]

        response = client.put(
            f"/orders/{order_number}",
            json={"delivery_attempt": {"status": "failed"}},
            headers=ADMIN,
        )

        assert response.status_code == 422

    def test_customer_cannot_update_status(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]

        response = client.put(f"/orders/{order_number}", json={"status": "confirmed"}, headers=ASHA)

        assert response.status_code == 403

    def test_customer_cancels(self, client, make_product, address):
        product = make_product(stock=5)
        order_number = _place(client, product, address, quantity=2).json()["order_number"]

        response = client.request("DELETE", f"/orders/{order_number}", json={"reason": "Ordered twice"}, headers=ASHA)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["cancellation_reason"] == "Ordered twice"
        assert _stock(product.id) == 5

    def test_cancel_twice(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]
        client.delete(f"/orders/{order_number}", headers=ASHA)

        assert client.delete(f"/orders/{order_number}", headers=ASHA).status_code == 422

    def test_admin_deletes_cancelled_order(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]
        client.delete(f"/orders/{order_number}", headers=ASHA)

        response = client.delete(f"/admin/orders/{order_number}", headers=ADMIN)

        assert response.status_code == 200
        assert response.json() == {"status": "deleted"}
        assert client.get(f"/orders/{order_number}", headers=ADMIN).status_code == 404

    def test_confirmed_order_cannot_be_deleted(self, client, make_product, address):
        product = make_product()
        order_number = _place(client, product, address).json()["order_number"]
        client.put(f"/orders/{order_number}", json={"status": "confirmed"}, headers=ADMIN)

        assert client.delete(f"/admin/orders/{order_number}", headers=ADMIN).status_code == 422
