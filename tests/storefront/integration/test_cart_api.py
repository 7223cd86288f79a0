"""Integration tests for the cart endpoints."""

ASHA = {"Authorization": "Bearer tok-asha"}
RAVI = {"Authorization": "Bearer tok-ravi"}


class TestCartEndpoints:
    def test_empty_cart(self, client):
        response = client.get("/cart", headers=ASHA)

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total_amount"] == 0

    def test_requires_authentication(self, client):
        assert client.get("/cart").status_code == 401

    def test_add_and_merge(self, client, make_product):
        product = make_product(price=120.0, stock=10)

        client.post("/cart", json={"product_id": str(product.id), "quantity": 2}, headers=ASHA)
        response = client.post("/cart", json={"product_id": str(product.id), "quantity": 3}, headers=ASHA)

        assert response.status_code == 200
        body = response.json()
        assert body["unique_items"] == 1
        assert body["total_items"] == 5
        assert body["total_amount"] == 600.0

    def test_carts_are_per_user(self, client, make_product):
        product = make_product()
        client.post("/cart", json={"product_id": str(product.id)}, headers=ASHA)

        assert client.get("/cart", headers=RAVI).json()["items"] == []

    def test_add_beyond_stock(self, client, make_product):
        product = make_product(stock=2)

        response = client.post("/cart", json={"product_id": str(product.id), "quantity": 3}, headers=ASHA)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InsufficientStock"
        assert body["available_stock"] == 2

    def test_add_unknown_product(self, client):
        response = client.post("/cart", json={"product_id": "missing"}, headers=ASHA)
        assert response.status_code == 404

    def test_update_quantity(self, client, make_product):
        product = make_product(price=50.0)
        client.post("/cart", json={"product_id": str(product.id)}, headers=ASHA)

        response = client.put("/cart", json={"product_id": str(product.id), "quantity": 4}, headers=ASHA)

        assert response.status_code == 200
        assert response.json()["items"][0]["quantity"] == 4

    def test_update_to_zero_is_rejected(self, client, make_product):
        product = make_product()
        client.post("/cart", json={"product_id": str(product.id)}, headers=ASHA)

        response = client.put("/cart", json={"product_id": str(product.id), "quantity": 0}, headers=ASHA)

        assert response.status_code == 400

    def test_remove_line_and_clear(self, client, make_product):
        first, second = make_product(), make_product()
        client.post("/cart", json={"product_id": str(first.id)}, headers=ASHA)
        client.post("/cart", json={"product_id": str(second.id)}, headers=ASHA)

        response = client.delete(f"/cart?product_id={first.id}", headers=ASHA)
        assert [item["product_id"] for item in response.json()["items"]] == [str(second.id)]

        response = client.delete("/cart", headers=ASHA)
        assert response.json()["items"] == []
