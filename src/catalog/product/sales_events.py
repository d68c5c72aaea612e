"""Inbound cross-domain event handlers: Catalog reacts to Sales events.

Sales decides when stock leaves and returns (order processing, order
cancellation, credit memo restock); Catalog owns the on-hand quantity and
applies the movement. Events are imported from shared.events.sales and
registered as external events via catalog.register_external_event().
"""

import json

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.sales import CreditMemoInventoryRestored, OrderInventoryDeducted, OrderInventoryRestored

from catalog.domain import catalog
from catalog.product.product import Product

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
catalog.register_external_event(OrderInventoryDeducted, "Sales.OrderInventoryDeducted.v1")
catalog.register_external_event(OrderInventoryRestored, "Sales.OrderInventoryRestored.v1")
catalog.register_external_event(CreditMemoInventoryRestored, "Sales.CreditMemoInventoryRestored.v1")


def _load_items(raw):
    items = json.loads(raw) if isinstance(raw, str) else (raw or [])
    return [item for item in items if item.get("product_id") and int(item.get("quantity") or 0) > 0]


def _restock(items, reason, **log_context):
    repo = current_domain.repository_for(Product)
    for item in _load_items(items):
        try:
            product = repo.get(item["product_id"])
        except ObjectNotFoundError:
            logger.warning("Skipping restock of unknown product", product_id=item["product_id"], **log_context)
            continue

        product.restore_stock(int(item["quantity"]), reason=reason)
        repo.add(product)


@catalog.event_handler(part_of=Product, stream_category="sales::order")
class OrderStockEventHandler:
    """Moves stock when orders start processing or are cancelled."""

    @handle(OrderInventoryDeducted)
    def on_order_inventory_deducted(self, event: OrderInventoryDeducted) -> None:
        repo = current_domain.repository_for(Product)
        for item in _load_items(event.items):
            try:
                product = repo.get(item["product_id"])
            except ObjectNotFoundError:
                logger.warning(
                    "Skipping stock deduction for unknown product",
                    product_id=item["product_id"],
                    order_id=str(event.order_id),
                )
                continue

            shortfall = product.deduct_stock(int(item["quantity"]), allow_shortfall=True)
            repo.add(product)

            if shortfall:
                logger.warning(
                    "Order deducted more stock than was on hand",
                    product_id=item["product_id"],
                    sku=product.sku,
                    order_number=event.order_number,
                    shortfall=shortfall,
                )

    @handle(OrderInventoryRestored)
    def on_order_inventory_restored(self, event: OrderInventoryRestored) -> None:
        logger.info("Restocking items for cancelled order", order_id=str(event.order_id), reason=event.reason)
        _restock(event.items, "order_cancelled", order_id=str(event.order_id))


@catalog.event_handler(part_of=Product, stream_category="sales::credit_memo")
class CreditMemoStockEventHandler:
    """Puts refunded items back on the shelf."""

    @handle(CreditMemoInventoryRestored)
    def on_credit_memo_inventory_restored(self, event: CreditMemoInventoryRestored) -> None:
        logger.info(
            "Restocking items from credit memo",
            credit_memo_id=str(event.credit_memo_id),
            order_id=str(event.order_id),
        )
        _restock(event.items, "credit_memo", credit_memo_id=str(event.credit_memo_id))
