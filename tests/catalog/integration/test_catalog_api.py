"""Integration tests for the Catalog FastAPI endpoints."""

import pytest
from catalog.api.routes import category_router, product_router
from catalog.product.creation import AddProduct
from catalog.product.product import Product
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean.utils.globals import current_domain
from shared.api import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(product_router)
    app.include_router(category_router)
    return TestClient(app)


def _create(client, **overrides):
    body = {"sku": "TSHIRT-BLK-M", "name": "Classic Black T-Shirt", "price": 29.99, "quantity": 5}
    body.update(overrides)
    response = client.post("/api/v1/products", json=body)
    assert response.status_code == 201
    return response.json()["data"]["product_id"]


class TestProductEndpoints:
    def test_create_product(self, client):
        product_id = _create(client)
        assert current_domain.repository_for(Product).get(product_id).name == "Classic Black T-Shirt"

    def test_envelope(self, client):
        response = client.post("/api/v1/products", json={"sku": "X-1", "name": "X", "price": 1.0})
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Product added"
        assert body["meta"]["version"] == "v1"

    def test_get_product(self, client):
        product_id = _create(client, special_price=24.99)
        data = client.get(f"/api/v1/products/{product_id}").json()["data"]
        assert data["final_price"] == 24.99
        assert data["in_stock"] is True

    def test_get_missing_product(self, client):
        response = client.get("/api/v1/products/does-not-exist")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_list_pages_past_one_hundred(self, client):
        for index in range(105):
            current_domain.process(
                AddProduct(sku=f"BULK-{index:03d}", name=f"Bulk item {index:03d}", price=1.0),
                asynchronous=False,
            )

        body = client.get("/api/v1/products", params={"page": 6, "per_page": 20}).json()
        assert body["meta"]["total"] == 105
        assert [item["sku"] for item in body["data"]] == [f"BULK-{index:03d}" for index in range(100, 105)]

    def test_list_hides_disabled_products(self, client):
        visible = _create(client, sku="A-1", name="Alpha")
        hidden = _create(client, sku="B-1", name="Beta")
        client.put(f"/api/v1/products/{hidden}/disable")

        body = client.get("/api/v1/products").json()
        assert [item["id"] for item in body["data"]] == [visible]
        assert body["meta"]["total"] == 1

    def test_search(self, client):
        _create(client, sku="MUG-1", name="Coffee Mug")
        _create(client, sku="TEE-1", name="Tee")
        data = client.get("/api/v1/products", params={"q": "mug"}).json()["data"]
        assert [item["sku"] for item in data] == ["MUG-1"]

    def test_invalid_special_price(self, client):
        product_id = _create(client)
        response = client.put(f"/api/v1/products/{product_id}/price", json={"price": 10.0, "special_price": 12.0})
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_request_validation(self, client):
        response = client.post("/api/v1/products", json={"sku": "X"})
        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_receive_stock(self, client):
        product_id = _create(client, quantity=0)
        client.post(f"/api/v1/products/{product_id}/stock", json={"quantity": 3})
        assert current_domain.repository_for(Product).get(product_id).quantity == 3


class TestCategoryEndpoints:
    def test_create_and_list(self, client):
        client.post("/api/v1/categories", json={"name": "Zebra", "position": 2})
        client.post("/api/v1/categories", json={"name": "Apple", "position": 1})
        names = [c["name"] for c in client.get("/api/v1/categories").json()["data"]]
        assert names == ["Apple", "Zebra"]

    def test_deactivated_categories_hidden(self, client):
        category_id = client.post("/api/v1/categories", json={"name": "Old"}).json()["data"]["category_id"]
        client.put(f"/api/v1/categories/{category_id}/deactivate")
        assert client.get("/api/v1/categories").json()["data"] == []
