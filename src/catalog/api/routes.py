"""FastAPI endpoints for the Catalog domain."""

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain
from shared.api import ApiResponse, paginate, paginated, success
from shared.queries import fetch_all

from catalog.api.schemas import (
    AddCategoryRequest,
    AddProductRequest,
    ChangePriceRequest,
    ReceiveStockRequest,
    UpdateCategoryRequest,
    UpdateProductDetailsRequest,
)
from catalog.category.category import Category
from catalog.category.management import AddCategory, DeactivateCategory, UpdateCategory
from catalog.product.creation import AddProduct
from catalog.product.details import ChangeProductPrice, UpdateProductDetails
from catalog.product.product import Product, ProductStatus
from catalog.product.status import DisableProduct, EnableProduct
from catalog.product.stock import ReceiveStock
from catalog.projections.product_listing import ProductListing

product_router = APIRouter(prefix="/api/v1/products", tags=["products"])
category_router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


def _listing_data(listing):
    return {
        "id": str(listing.product_id),
        "sku": listing.sku,
        "name": listing.name,
        "slug": listing.slug,
        "category_id": str(listing.category_id) if listing.category_id else None,
        "price": listing.price,
        "special_price": listing.special_price,
        "final_price": listing.final_price,
        "in_stock": listing.in_stock,
    }


def _product_data(product):
    return {
        "id": str(product.id),
        "sku": product.sku,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "category_id": str(product.category_id) if product.category_id else None,
        "price": product.price,
        "special_price": product.special_price,
        "final_price": product.effective_price(),
        "quantity": product.quantity,
        "track_inventory": product.track_inventory,
        "in_stock": product.can_fulfil(1),
        "status": product.status,
    }


def _category_data(category):
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "parent_id": str(category.parent_id) if category.parent_id else None,
        "position": category.position,
    }


# --- Product endpoints ---


@product_router.get("", response_model=ApiResponse)
async def list_products(
    category_id: str | None = None,
    q: str | None = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    query = current_domain.repository_for(ProductListing)._dao.query.filter(status=ProductStatus.ENABLED.value)
    if category_id:
        query = query.filter(category_id=category_id)
    listings = fetch_all(query.order_by("name"))
    if q:
        needle = q.lower()
        listings = [item for item in listings if needle in item.name.lower() or needle in item.sku.lower()]

    listings = sorted(listings, key=lambda item: item.name.lower())
    page_items, total = paginate(listings, page, per_page)
    return paginated([_listing_data(item) for item in page_items], total, page, per_page, "Products retrieved")


@product_router.get("/{product_id}", response_model=ApiResponse)
async def get_product(product_id: str) -> ApiResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return success(_product_data(product), "Product retrieved")


@product_router.post("", status_code=201, response_model=ApiResponse)
async def add_product(body: AddProductRequest) -> ApiResponse:
    command = AddProduct(
        sku=body.sku,
        name=body.name,
        price=body.price,
        special_price=body.special_price,
        quantity=body.quantity,
        track_inventory=body.track_inventory,
        category_id=body.category_id,
        description=body.description,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return success({"product_id": product_id}, "Product added")


@product_router.put("/{product_id}/details", response_model=ApiResponse)
async def update_product_details(product_id: str, body: UpdateProductDetailsRequest) -> ApiResponse:
    command = UpdateProductDetails(
        product_id=product_id,
        name=body.name,
        description=body.description,
        category_id=body.category_id,
    )
    current_domain.process(command, asynchronous=False)
    return success(message="Product updated")


@product_router.put("/{product_id}/price", response_model=ApiResponse)
async def change_price(product_id: str, body: ChangePriceRequest) -> ApiResponse:
    command = ChangeProductPrice(
        product_id=product_id,
        price=body.price,
        special_price=body.special_price,
    )
    current_domain.process(command, asynchronous=False)
    return success(message="Price updated")


@product_router.post("/{product_id}/stock", response_model=ApiResponse)
async def receive_stock(product_id: str, body: ReceiveStockRequest) -> ApiResponse:
    current_domain.process(ReceiveStock(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return success(message="Stock received")


@product_router.put("/{product_id}/enable", response_model=ApiResponse)
async def enable_product(product_id: str) -> ApiResponse:
    current_domain.process(EnableProduct(product_id=product_id), asynchronous=False)
    return success(message="Product enabled")


@product_router.put("/{product_id}/disable", response_model=ApiResponse)
async def disable_product(product_id: str) -> ApiResponse:
    current_domain.process(DisableProduct(product_id=product_id), asynchronous=False)
    return success(message="Product disabled")


# --- Category endpoints ---


@category_router.get("", response_model=ApiResponse)
async def list_categories() -> ApiResponse:
    categories = fetch_all(current_domain.repository_for(Category)._dao.query.filter(is_active=True).order_by("name"))
    categories = sorted(categories, key=lambda c: (c.position or 0, c.name.lower()))
    return success([_category_data(c) for c in categories], "Categories retrieved")


@category_router.post("", status_code=201, response_model=ApiResponse)
async def add_category(body: AddCategoryRequest) -> ApiResponse:
    command = AddCategory(name=body.name, parent_id=body.parent_id, position=body.position)
    category_id = current_domain.process(command, asynchronous=False)
    return success({"category_id": category_id}, "Category added")


@category_router.put("/{category_id}", response_model=ApiResponse)
async def update_category(category_id: str, body: UpdateCategoryRequest) -> ApiResponse:
    command = UpdateCategory(category_id=category_id, name=body.name, position=body.position)
    current_domain.process(command, asynchronous=False)
    return success(message="Category updated")


@category_router.put("/{category_id}/deactivate", response_model=ApiResponse)
async def deactivate_category(category_id: str) -> ApiResponse:
    current_domain.process(DeactivateCategory(category_id=category_id), asynchronous=False)
    return success(message="Category deactivated")
