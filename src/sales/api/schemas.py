"""Pydantic request schemas for the Sales API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# --- Storefront ---


class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = Field(None, max_length=255)


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class ApplyCouponRequest(BaseModel):
    coupon_code: str = Field(..., max_length=50)


class AddressSchema(BaseModel):
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


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart_id": "cart-001",
                    "customer_email": "jane@example.com",
                    "shipping_address": {
                        "first_name": "Jane",
                        "last_name": "Doe",
                        "address_line_1": "123 Main St",
                        "city": "Springfield",
                        "postal_code": "62704",
                        "country": "US",
                    },
                    "same_as_shipping": True,
                    "shipping_method": "standard",
                    "payment_method": "card",
                }
            ]
        }
    }

    cart_id: str
    customer_id: str | None = None
    customer_email: str = Field(..., max_length=254)
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    same_as_shipping: bool = True
    shipping_method: str = "standard"
    payment_method: str = Field(..., max_length=50)
    notes: str | None = None


class AddToWishlistRequest(BaseModel):
    product_id: str


class MoveToCartRequest(BaseModel):
    cart_id: str


# --- Orders ---


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(..., ge=1)
    sku: str | None = None
    name: str | None = None
    price: float | None = Field(None, ge=0)


class CreateOrderRequest(BaseModel):
    customer_id: str | None = None
    customer_email: str = Field(..., max_length=254)
    items: list[OrderItemRequest] = Field(..., min_length=1)
    shipping_address: AddressSchema
    billing_address: AddressSchema | None = None
    shipping_method: str = "standard"
    payment_method: str | None = None
    shipping_amount: float | None = Field(None, ge=0)
    discount_amount: float = Field(0.0, ge=0)
    tax_amount: float | None = Field(None, ge=0)
    notes: str | None = None


class UpdateOrderStatusRequest(BaseModel):
    status: str
    comment: str | None = None
    notify_customer: bool = False


class UpdatePaymentStatusRequest(BaseModel):
    payment_status: str
    comment: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str = Field(..., max_length=500)
    restore_stock: bool = True


class AddOrderCommentRequest(BaseModel):
    comment: str
    notify_customer: bool = False
    visible_to_customer: bool = True


# --- Invoices ---


class CreateInvoiceRequest(BaseModel):
    order_id: str
    notes: str | None = None


class CancelInvoiceRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# --- Shipments ---


class CreateShipmentRequest(BaseModel):
    order_id: str
    items: dict[str, int]
    carrier: str | None = Field(None, max_length=100)
    tracking_number: str | None = Field(None, max_length=100)
    notes: str | None = None


class UpdateShipmentRequest(BaseModel):
    carrier: str | None = Field(None, max_length=100)
    tracking_number: str | None = Field(None, max_length=100)
    tracking_url: str | None = Field(None, max_length=500)
    notes: str | None = None


class UpdateTrackingRequest(BaseModel):
    tracking_number: str = Field(..., max_length=100)
    carrier: str | None = Field(None, max_length=100)
    tracking_url: str | None = Field(None, max_length=500)


class UpdateShipmentStatusRequest(BaseModel):
    status: str


class CancelShipmentRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# --- Credit memos ---


class CreditMemoItemRequest(BaseModel):
    qty: int = 0
    restore_stock: bool = False


class CreateCreditMemoRequest(BaseModel):
    order_id: str
    items: dict[str, CreditMemoItemRequest]
    refund_shipping: float = Field(0.0, ge=0)
    adjustment_positive: float = Field(0.0, ge=0)
    adjustment_negative: float = Field(0.0, ge=0)
    refund_method: str | None = None
    notes: str | None = None
    process_refund: bool = False
    restore_inventory: bool = False


class UpdateCreditMemoRequest(BaseModel):
    notes: str | None = None
    admin_notes: str | None = None
    adjustment_positive: float | None = Field(None, ge=0)
    adjustment_negative: float | None = Field(None, ge=0)
    refund_method: str | None = None


class CancelCreditMemoRequest(BaseModel):
    reason: str = Field(..., max_length=500)


# --- Transactions ---


class RecordTransactionRequest(BaseModel):
    order_id: str
    transaction_type: str
    amount: float = Field(..., ge=0)
    status: str = "pending"
    gateway: str | None = None
    gateway_transaction_id: str | None = None
    response_data: dict[str, Any] | None = None
    notes: str | None = None


class RecordPaymentRequest(BaseModel):
    order_id: str
    gateway: str
    gateway_transaction_id: str
    amount: float = Field(..., ge=0)
    status: str = "completed"


class WebhookTransactionRequest(BaseModel):
    order_id: str
    gateway: str
    gateway_transaction_id: str
    transaction_type: str
    status: str
    amount: float = Field(..., ge=0)
    payload: dict[str, Any] = Field(default_factory=dict)


class RefundTransactionRequest(BaseModel):
    amount: float = Field(..., gt=0)
    credit_memo_id: str | None = None
    reason: str | None = Field(None, max_length=500)


class CompleteTransactionRequest(BaseModel):
    response_data: dict[str, Any] | None = None


class FailTransactionRequest(BaseModel):
    reason: str = Field(..., max_length=500)
