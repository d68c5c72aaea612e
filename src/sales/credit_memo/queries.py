"""Credit memo lookups and what is still refundable on an order."""

from collections import Counter

from protean.utils.globals import current_domain
from shared.queries import fetch_all

from sales.credit_memo.credit_memo import CreditMemo
from sales.order.order import Order


def order_credit_memos(order_id):
    query = current_domain.repository_for(CreditMemo)._dao.query.filter(order_id=str(order_id)).order_by("created_at")
    return fetch_all(query)


def refunded_quantities(order_id):
    """Quantity per order item already on credit memos that were not cancelled."""
    quantities = Counter()
    for memo in order_credit_memos(order_id):
        if memo.is_cancelled:
            continue
        for item in memo.items:
            quantities[str(item.order_item_id)] += item.quantity
    return dict(quantities)


def refundable_items(order_id):
    """Order items that still have units available to refund."""
    order = current_domain.repository_for(Order).get(str(order_id))
    refunded = refunded_quantities(order.id)

    items = []
    for item in order.items:
        refunded_quantity = refunded.get(str(item.id), 0)
        available = item.quantity - refunded_quantity
        if available <= 0:
            continue
        items.append(
            {
                "order_item_id": str(item.id),
                "product_id": str(item.product_id),
                "sku": item.sku,
                "name": item.name,
                "price": item.price,
                "ordered_quantity": item.quantity,
                "refunded_quantity": refunded_quantity,
                "available_quantity": available,
            }
        )
    return items
