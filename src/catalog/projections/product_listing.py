"""Product listing: storefront browse and search projection."""

from protean.core.projector import on
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from catalog.domain import catalog
from catalog.product.events import (
    ProductAdded,
    ProductDetailsUpdated,
    ProductPriceChanged,
    ProductStatusChanged,
    ProductStockChanged,
)
from catalog.product.product import Product


@catalog.projection
class ProductListing:
    product_id: Identifier(identifier=True, required=True)
    sku: String(required=True)
    name: String(required=True)
    slug: String()
    category_id: Identifier()
    price: Float(required=True)
    special_price: Float()
    final_price: Float(required=True)
    quantity: Integer(default=0)
    track_inventory: Boolean(default=True)
    in_stock: Boolean(default=False)
    status: String(required=True)
    added_at: DateTime()


def _in_stock(listing):
    return not listing.track_inventory or (listing.quantity or 0) > 0


@catalog.projector(projector_for=ProductListing, aggregates=[Product])
class ProductListingProjector:
    @on(ProductAdded)
    def on_product_added(self, event):
        listing = ProductListing(
            product_id=event.product_id,
            sku=event.sku,
            name=event.name,
            slug=event.slug,
            category_id=event.category_id,
            price=event.price,
            special_price=event.special_price,
            final_price=event.special_price if event.special_price is not None else event.price,
            quantity=event.quantity or 0,
            track_inventory=event.track_inventory,
            status=event.status,
            added_at=event.added_at,
        )
        listing.in_stock = _in_stock(listing)
        current_domain.repository_for(ProductListing).add(listing)

    @on(ProductDetailsUpdated)
    def on_details_updated(self, event):
        repo = current_domain.repository_for(ProductListing)
        listing = repo.get(event.product_id)
        listing.name = event.name
        listing.slug = event.slug
        listing.category_id = event.category_id
        repo.add(listing)

    @on(ProductPriceChanged)
    def on_price_changed(self, event):
        repo = current_domain.repository_for(ProductListing)
        listing = repo.get(event.product_id)
        listing.price = event.price
        listing.special_price = event.special_price
        listing.final_price = event.final_price
        repo.add(listing)

    @on(ProductStockChanged)
    def on_stock_changed(self, event):
        repo = current_domain.repository_for(ProductListing)
        listing = repo.get(event.product_id)
        listing.quantity = event.new_quantity
        listing.in_stock = _in_stock(listing)
        repo.add(listing)

    @on(ProductStatusChanged)
    def on_status_changed(self, event):
        repo = current_domain.repository_for(ProductListing)
        listing = repo.get(event.product_id)
        listing.status = event.status
        repo.add(listing)
