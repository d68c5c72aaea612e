"""Integration tests for the Customers FastAPI endpoints."""

import pytest
from customers.api.routes import router
from fastapi import FastAPI
from fastapi.testclient import TestClient
from shared.api import register_error_handlers

ADDRESS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "address_line_1": "123 Main St",
    "city": "Springfield",
    "postal_code": "62704",
    "country": "US",
}


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(router)
    return TestClient(app)


def _register(client, email="jane@example.com"):
    response = client.post(
        "/api/v1/customers",
        json={"email": email, "first_name": "Jane", "last_name": "Doe"},
    )
    assert response.status_code == 201
    return response.json()["data"]["customer_id"]


class TestCustomerEndpoints:
    def test_register_and_get(self, client):
        customer_id = _register(client)
        data = client.get(f"/api/v1/customers/{customer_id}").json()["data"]
        assert data["email"] == "jane@example.com"
        assert data["full_name"] == "Jane Doe"
        assert data["status"] == "active"

    def test_duplicate_email_is_validation_error(self, client):
        _register(client)
        response = client.post(
            "/api/v1/customers",
            json={"email": "jane@example.com", "first_name": "J", "last_name": "D"},
        )
        assert response.status_code == 422
        assert "email" in response.json()["errors"]

    def test_update_profile(self, client):
        customer_id = _register(client)
        response = client.put(f"/api/v1/customers/{customer_id}", json={"phone": "555-0100"})
        assert response.status_code == 200
        assert client.get(f"/api/v1/customers/{customer_id}").json()["data"]["phone"] == "555-0100"

    def test_unknown_customer(self, client):
        assert client.get("/api/v1/customers/nobody").status_code == 404


class TestAddressEndpoints:
    def test_address_lifecycle(self, client):
        customer_id = _register(client)
        response = client.post(f"/api/v1/customers/{customer_id}/addresses", json=ADDRESS)
        assert response.status_code == 201
        address_id = response.json()["data"]["address_id"]

        client.put(f"/api/v1/customers/{customer_id}/addresses/{address_id}", json={"city": "Ogdenville"})
        addresses = client.get(f"/api/v1/customers/{customer_id}/addresses").json()["data"]
        assert addresses[0]["city"] == "Ogdenville"
        assert addresses[0]["is_default_shipping"] is True

        client.delete(f"/api/v1/customers/{customer_id}/addresses/{address_id}")
        assert client.get(f"/api/v1/customers/{customer_id}/addresses").json()["data"] == []


class TestAccountEndpoints:
    def test_reactivate_active_customer_is_invalid_state(self, client):
        customer_id = _register(client)
        response = client.put(f"/api/v1/customers/{customer_id}/reactivate")
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATE"

    def test_suspend(self, client):
        customer_id = _register(client)
        response = client.put(f"/api/v1/customers/{customer_id}/suspend", json={"reason": "Fraud"})
        assert response.status_code == 200
        assert client.get(f"/api/v1/customers/{customer_id}").json()["data"]["status"] == "suspended"
