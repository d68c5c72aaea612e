"""Pydantic request schemas for the Catalog API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class AddProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "sku": "TSHIRT-BLK-M",
                    "name": "Classic Black T-Shirt",
                    "price": 29.99,
                    "special_price": 24.99,
                    "quantity": 100,
                    "track_inventory": True,
                }
            ]
        }
    }

    sku: str = Field(..., max_length=64)
    name: str = Field(..., max_length=255)
    price: float = Field(..., gt=0)
    special_price: float | None = Field(None, gt=0)
    quantity: int = Field(0, ge=0)
    track_inventory: bool = True
    category_id: str | None = None
    description: str | None = None


class UpdateProductDetailsRequest(BaseModel):
    name: str | None = Field(None, max_length=255)
    description: str | None = None
    category_id: str | None = None


class ChangePriceRequest(BaseModel):
    price: float = Field(..., gt=0)
    special_price: float | None = Field(None, gt=0)


class ReceiveStockRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class AddCategoryRequest(BaseModel):
    name: str = Field(..., max_length=100)
    parent_id: str | None = None
    position: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(None, max_length=100)
    position: int | None = None
