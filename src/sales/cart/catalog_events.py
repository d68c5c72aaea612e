"""Inbound cross-domain event handler: Sales reacts to Catalog events.

Keeps the CatalogProduct read model in step with Catalog so that carts and
wishlists see current prices, stock and availability. Events are imported
from shared.events.catalog and registered as external events via
sales.register_external_event().
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.catalog import (
    ProductAdded,
    ProductDetailsUpdated,
    ProductPriceChanged,
    ProductStatusChanged,
    ProductStockChanged,
)

from sales.cart.cart import Cart
from sales.domain import sales
from sales.projections.catalog_product import CatalogProduct

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
sales.register_external_event(ProductAdded, "Catalog.ProductAdded.v1")
sales.register_external_event(ProductDetailsUpdated, "Catalog.ProductDetailsUpdated.v1")
sales.register_external_event(ProductPriceChanged, "Catalog.ProductPriceChanged.v1")
sales.register_external_event(ProductStockChanged, "Catalog.ProductStockChanged.v1")
sales.register_external_event(ProductStatusChanged, "Catalog.ProductStatusChanged.v1")


def _update(product_id, **changes):
    repo = current_domain.repository_for(CatalogProduct)
    try:
        record = repo.get(str(product_id))
    except ObjectNotFoundError:
        logger.warning("Catalog event for unknown product", product_id=str(product_id))
        return

    for field, value in changes.items():
        setattr(record, field, value)
    repo.add(record)


@sales.event_handler(part_of=Cart, stream_category="catalog::product")
class CatalogProductEventHandler:
    """Mirrors Catalog product changes into the CatalogProduct read model."""

    @handle(ProductAdded)
    def on_product_added(self, event: ProductAdded) -> None:
        current_domain.repository_for(CatalogProduct).add(
            CatalogProduct(
                product_id=event.product_id,
                sku=event.sku,
                name=event.name,
                price=event.price,
                special_price=event.special_price,
                quantity=event.quantity or 0,
                track_inventory=event.track_inventory,
                status=event.status,
            )
        )
        logger.info("Catalog product registered for sale", product_id=str(event.product_id), sku=event.sku)

    @handle(ProductDetailsUpdated)
    def on_product_details_updated(self, event: ProductDetailsUpdated) -> None:
        _update(event.product_id, name=event.name)

    @handle(ProductPriceChanged)
    def on_product_price_changed(self, event: ProductPriceChanged) -> None:
        _update(event.product_id, price=event.price, special_price=event.special_price)

    @handle(ProductStockChanged)
    def on_product_stock_changed(self, event: ProductStockChanged) -> None:
        _update(event.product_id, quantity=event.new_quantity)

    @handle(ProductStatusChanged)
    def on_product_status_changed(self, event: ProductStatusChanged) -> None:
        _update(event.product_id, status=event.status)
