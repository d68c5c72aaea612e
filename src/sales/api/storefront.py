"""FastAPI endpoints for the storefront: carts, checkout, wishlist and "my orders"."""

import json

from fastapi import APIRouter, HTTPException, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from shared.api import ApiResponse, paginated, success
from shared.queries import page_of

from sales.api.schemas import (
    AddToCartRequest,
    AddToWishlistRequest,
    ApplyCouponRequest,
    CreateCartRequest,
    MoveToCartRequest,
    PlaceOrderRequest,
    UpdateCartItemRequest,
)
from sales.api.serializers import cart_data, order_data, order_summary_data, wishlist_data
from sales.cart.cart import Cart
from sales.cart.coupons import ApplyCoupon, RemoveCoupon
from sales.cart.items import AddToCart, ClearCart, RemoveCartItem, UpdateCartItem
from sales.cart.management import CreateCart
from sales.checkout.placement import PlaceOrder
from sales.checkout.summary import checkout_summary
from sales.order.order import Order
from sales.projections.order_summary import OrderSummary
from sales.wishlist.management import (
    AddToWishlist,
    MoveWishlistItemToCart,
    RemoveFromWishlist,
    wishlist_for,
)

cart_router = APIRouter(prefix="/api/v1/carts", tags=["carts"])
checkout_router = APIRouter(prefix="/api/v1/checkout", tags=["checkout"])
wishlist_router = APIRouter(prefix="/api/v1/wishlist", tags=["wishlist"])
order_router = APIRouter(prefix="/api/v1/orders", tags=["orders"])
customer_order_router = APIRouter(prefix="/api/v1/customers", tags=["orders"])


def _cart(cart_id):
    return current_domain.repository_for(Cart).get(cart_id)


# --- Cart endpoints ---


@cart_router.post("", status_code=201, response_model=ApiResponse)
async def create_cart(body: CreateCartRequest) -> ApiResponse:
    cart_id = current_domain.process(
        CreateCart(customer_id=body.customer_id, session_id=body.session_id),
        asynchronous=False,
    )
    return success(cart_data(_cart(cart_id)), "Cart created")


@cart_router.get("/{cart_id}", response_model=ApiResponse)
async def get_cart(cart_id: str) -> ApiResponse:
    return success(cart_data(_cart(cart_id)), "Cart retrieved")


@cart_router.post("/{cart_id}/items", status_code=201, response_model=ApiResponse)
async def add_to_cart(cart_id: str, body: AddToCartRequest) -> ApiResponse:
    command = AddToCart(cart_id=cart_id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return success(cart_data(_cart(cart_id)), "Item added to cart")


@cart_router.put("/{cart_id}/items/{item_id}", response_model=ApiResponse)
async def update_cart_item(cart_id: str, item_id: str, body: UpdateCartItemRequest) -> ApiResponse:
    command = UpdateCartItem(cart_id=cart_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return success(cart_data(_cart(cart_id)), "Cart updated")


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=ApiResponse)
async def remove_cart_item(cart_id: str, item_id: str) -> ApiResponse:
    current_domain.process(RemoveCartItem(cart_id=cart_id, item_id=item_id), asynchronous=False)
    return success(cart_data(_cart(cart_id)), "Item removed from cart")


@cart_router.delete("/{cart_id}/items", response_model=ApiResponse)
async def clear_cart(cart_id: str) -> ApiResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return success(cart_data(_cart(cart_id)), "Cart cleared")


@cart_router.post("/{cart_id}/coupon", response_model=ApiResponse)
async def apply_coupon(cart_id: str, body: ApplyCouponRequest) -> ApiResponse:
    current_domain.process(ApplyCoupon(cart_id=cart_id, coupon_code=body.coupon_code), asynchronous=False)
    return success(cart_data(_cart(cart_id)), "Coupon applied")


@cart_router.delete("/{cart_id}/coupon", response_model=ApiResponse)
async def remove_coupon(cart_id: str) -> ApiResponse:
    current_domain.process(RemoveCoupon(cart_id=cart_id), asynchronous=False)
    return success(cart_data(_cart(cart_id)), "Coupon removed")


# --- Checkout endpoints ---


@checkout_router.get("/{cart_id}/summary", response_model=ApiResponse)
async def get_checkout_summary(cart_id: str, shipping_method: str = "standard") -> ApiResponse:
    return success(checkout_summary(cart_id, shipping_method), "Checkout summary")


@checkout_router.post("", status_code=201, response_model=ApiResponse)
async def place_order(body: PlaceOrderRequest) -> ApiResponse:
    command = PlaceOrder(
        cart_id=body.cart_id,
        customer_id=body.customer_id,
        customer_email=body.customer_email,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        same_as_shipping=body.same_as_shipping,
        shipping_method=body.shipping_method,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return success(
        {"order_id": order_id, "order_number": order.order_number, "total": order.total},
        "Order placed",
    )


# --- Wishlist endpoints ---


@wishlist_router.get("/{customer_id}", response_model=ApiResponse)
async def get_wishlist(customer_id: str) -> ApiResponse:
    return success(wishlist_data(wishlist_for(customer_id), customer_id), "Wishlist retrieved")


@wishlist_router.post("/{customer_id}/items", status_code=201, response_model=ApiResponse)
async def add_to_wishlist(customer_id: str, body: AddToWishlistRequest) -> ApiResponse:
    item_id = current_domain.process(
        AddToWishlist(customer_id=customer_id, product_id=body.product_id),
        asynchronous=False,
    )
    return success({"item_id": item_id}, "Product added to wishlist")


def _wishlist_item_not_found(exc):
    return HTTPException(status_code=404, detail={"message": str(exc), "code": "WISHLIST_ITEM_NOT_FOUND"})


@wishlist_router.delete("/{customer_id}/items/{item_id}", response_model=ApiResponse)
async def remove_from_wishlist(customer_id: str, item_id: str) -> ApiResponse:
    try:
        current_domain.process(RemoveFromWishlist(customer_id=customer_id, item_id=item_id), asynchronous=False)
    except ObjectNotFoundError as exc:
        raise _wishlist_item_not_found(exc)
    return success(message="Product removed from wishlist")


@wishlist_router.post("/{customer_id}/items/{item_id}/move-to-cart", response_model=ApiResponse)
async def move_to_cart(customer_id: str, item_id: str, body: MoveToCartRequest) -> ApiResponse:
    command = MoveWishlistItemToCart(customer_id=customer_id, item_id=item_id, cart_id=body.cart_id)
    try:
        current_domain.process(command, asynchronous=False)
    except ObjectNotFoundError as exc:
        raise _wishlist_item_not_found(exc)
    return success(cart_data(_cart(body.cart_id)), "Product moved to cart")


# --- Order endpoints ---


@order_router.get("/{order_id}", response_model=ApiResponse)
async def get_order(order_id: str) -> ApiResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return success(order_data(order, history=order.customer_history()), "Order retrieved")


@customer_order_router.get("/{customer_id}/orders", response_model=ApiResponse)
async def list_customer_orders(
    customer_id: str,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    query = current_domain.repository_for(OrderSummary)._dao.query.filter(customer_id=customer_id)
    page_items, total = page_of(query.order_by("-created_at"), page, per_page)
    return paginated([order_summary_data(s) for s in page_items], total, page, per_page, "Orders retrieved")
