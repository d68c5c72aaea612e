"""Shipment lookups and statistics."""

from collections import Counter

from protean.utils.globals import current_domain
from shared.queries import count, fetch_all

from sales.shipment.shipment import Shipment, ShipmentStatus


def order_shipments(order_id):
    query = current_domain.repository_for(Shipment)._dao.query.filter(order_id=str(order_id)).order_by("created_at")
    return fetch_all(query)


def shipped_quantities(order_id):
    """Quantity per order item already on shipments that were not cancelled."""
    quantities = Counter()
    for shipment in order_shipments(order_id):
        if shipment.is_cancelled:
            continue
        for item in shipment.items:
            quantities[str(item.order_item_id)] += item.quantity
    return dict(quantities)


def shipment_statistics():
    query = current_domain.repository_for(Shipment)._dao.query
    statistics = {status.value: count(query.filter(status=status.value)) for status in ShipmentStatus}
    statistics["total"] = count(query)
    return statistics
