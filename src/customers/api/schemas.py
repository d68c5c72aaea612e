"""Pydantic request schemas for the Customers API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterCustomerRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "email": "jane@example.com",
                    "first_name": "Jane",
                    "last_name": "Doe",
                    "phone": "+1-555-0100",
                }
            ]
        }
    }

    email: str = Field(..., max_length=254)
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    phone: str | None = Field(None, max_length=20)


class UpdateProfileRequest(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)


class AddAddressRequest(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    company: str | None = None
    address_line_1: str = Field(..., max_length=255)
    address_line_2: str | None = None
    city: str = Field(..., max_length=100)
    state: str | None = None
    postal_code: str = Field(..., max_length=20)
    country: str = Field(..., max_length=100)
    phone: str | None = None
    is_default_shipping: bool = False
    is_default_billing: bool = False


class UpdateAddressRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    address_line_1: str | None = None
    address_line_2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    phone: str | None = None
    is_default_shipping: bool | None = None
    is_default_billing: bool | None = None


class SuspendCustomerRequest(BaseModel):
    reason: str = Field(..., max_length=500)
