"""Integration tests for the storefront endpoints: carts, checkout, wishlist and orders."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sales.api.storefront import cart_router, checkout_router, customer_order_router, order_router, wishlist_router
from shared.api import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    for router in (cart_router, checkout_router, wishlist_router, order_router, customer_order_router):
        app.include_router(router)
    return TestClient(app)


def _cart(client, customer_id="cust-001"):
    response = client.post("/api/v1/carts", json={"customer_id": customer_id})
    assert response.status_code == 201
    return response.json()["data"]["id"]


def _add(client, cart_id, product_id="prod-001", quantity=2):
    return client.post(f"/api/v1/carts/{cart_id}/items", json={"product_id": product_id, "quantity": quantity})


def _checkout(client, cart_id, shipping_address, **overrides):
    body = {
        "cart_id": cart_id,
        "customer_email": "jane@example.com",
        "shipping_address": shipping_address,
        "shipping_method": "standard",
        "payment_method": "card",
    }
    body.update(overrides)
    return client.post("/api/v1/checkout", json=body)


class TestCartEndpoints:
    def test_add_and_view(self, client, add_product):
        add_product()
        cart_id = _cart(client)
        response = _add(client, cart_id)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["items"][0]["quantity"] == 2
        assert data["totals"]["total"] == 115.0

        response = client.get(f"/api/v1/carts/{cart_id}")
        assert response.json()["message"] == "Cart retrieved"

    def test_insufficient_stock(self, client, add_product):
        add_product(quantity=1)
        response = _add(client, _cart(client))
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "INSUFFICIENT_STOCK"
        assert "stock" in body["errors"]

    def test_unavailable_product(self, client):
        response = _add(client, _cart(client), product_id="ghost")
        assert response.status_code == 400
        assert response.json()["code"] == "PRODUCT_UNAVAILABLE"

    def test_zero_quantity_is_invalid_input(self, client, add_product):
        add_product()
        response = _add(client, _cart(client), quantity=0)
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_update_and_remove(self, client, add_product):
        add_product()
        cart_id = _cart(client)
        item_id = _add(client, cart_id).json()["data"]["items"][0]["id"]

        response = client.put(f"/api/v1/carts/{cart_id}/items/{item_id}", json={"quantity": 4})
        assert response.json()["data"]["items"][0]["quantity"] == 4

        response = client.delete(f"/api/v1/carts/{cart_id}/items/{item_id}")
        assert response.json()["data"]["items"] == []

    def test_coupon_on_empty_cart(self, client):
        response = client.post(f"/api/v1/carts/{_cart(client)}/coupon", json={"coupon_code": "WELCOME10"})
        assert response.status_code == 400
        assert response.json()["code"] == "CART_EMPTY"

    def test_invalid_coupon(self, client, add_product):
        add_product()
        cart_id = _cart(client)
        _add(client, cart_id)
        response = client.post(f"/api/v1/carts/{cart_id}/coupon", json={"coupon_code": "BOGUS"})
        assert response.status_code == 422
        assert "coupon_code" in response.json()["errors"]

    def test_missing_cart(self, client):
        response = client.get("/api/v1/carts/missing")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"


class TestCheckoutEndpoints:
    def test_summary(self, client, add_product):
        add_product()
        cart_id = _cart(client)
        _add(client, cart_id)
        response = client.get(f"/api/v1/checkout/{cart_id}/summary", params={"shipping_method": "express"})
        totals = response.json()["data"]["totals"]
        assert totals["shipping_cost"] == 15.0
        assert totals["total"] == 125.0

    def test_place_order(self, client, add_product, shipping_address):
        add_product()
        cart_id = _cart(client)
        _add(client, cart_id)
        response = _checkout(client, cart_id, shipping_address)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["order_number"].startswith("ORD-")
        assert data["total"] == 115.0

    def test_empty_cart(self, client, shipping_address):
        response = _checkout(client, _cart(client), shipping_address)
        assert response.status_code == 400
        assert response.json()["code"] == "CART_EMPTY"

    def test_address_is_validated(self, client, add_product, shipping_address):
        add_product()
        cart_id = _cart(client)
        _add(client, cart_id)
        del shipping_address["city"]
        response = _checkout(client, cart_id, shipping_address)
        assert response.status_code == 422
        assert "shipping_address.city" in response.json()["errors"]


class TestWishlistEndpoints:
    def test_add_list_remove(self, client, add_product):
        add_product()
        response = client.post("/api/v1/wishlist/cust-001/items", json={"product_id": "prod-001"})
        assert response.status_code == 201
        item_id = response.json()["data"]["item_id"]

        items = client.get("/api/v1/wishlist/cust-001").json()["data"]["items"]
        assert [item["product_id"] for item in items] == ["prod-001"]

        response = client.delete(f"/api/v1/wishlist/cust-001/items/{item_id}")
        assert response.status_code == 200

    def test_duplicate(self, client, add_product):
        add_product()
        client.post("/api/v1/wishlist/cust-001/items", json={"product_id": "prod-001"})
        response = client.post("/api/v1/wishlist/cust-001/items", json={"product_id": "prod-001"})
        assert response.status_code == 400
        assert response.json()["code"] == "ALREADY_IN_WISHLIST"

    def test_missing_item(self, client):
        response = client.delete("/api/v1/wishlist/cust-001/items/nope")
        assert response.status_code == 404
        assert response.json()["code"] == "WISHLIST_ITEM_NOT_FOUND"

    def test_move_to_cart(self, client, add_product):
        add_product()
        item_id = client.post("/api/v1/wishlist/cust-001/items", json={"product_id": "prod-001"}).json()["data"][
            "item_id"
        ]
        cart_id = _cart(client)
        response = client.post(f"/api/v1/wishlist/cust-001/items/{item_id}/move-to-cart", json={"cart_id": cart_id})
        assert response.json()["data"]["items"][0]["quantity"] == 1


class TestOrderEndpoints:
    def test_order_hides_internal_history(self, client, place_order):
        from protean import current_domain
        from sales.order.comments import AddOrderComment

        order_id = place_order()
        current_domain.process(
            AddOrderComment(order_id=order_id, comment="Internal note", visible_to_customer=False),
            asynchronous=False,
        )
        history = client.get(f"/api/v1/orders/{order_id}").json()["data"]["history"]
        assert "Internal note" not in [entry["comment"] for entry in history]
        assert history[0]["comment"] == "Order created"

    def test_customer_order_history(self, client, place_order):
        place_order()
        place_order()
        response = client.get("/api/v1/customers/cust-001/orders", params={"per_page": 1})
        body = response.json()
        assert len(body["data"]) == 1
        assert body["meta"]["total"] == 2
        assert body["meta"]["last_page"] == 2
        assert body["meta"]["from"] == 1
