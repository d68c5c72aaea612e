"""Shipment creation: command and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain
from shared.queries import unused_number

from sales.domain import sales
from sales.order.order import Order
from sales.shipment.queries import shipped_quantities
from sales.shipment.shipment import Shipment, generate_shipment_number

logger = structlog.get_logger(__name__)


@sales.command(part_of="Shipment")
class CreateShipment:
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: {"<order_item_id>": quantity}
    carrier = String(max_length=100)
    tracking_number = String(max_length=100)
    notes = Text()


def _shipment_lines(order, requested, shipped):
    lines = []
    for order_item_id, quantity in requested.items():
        quantity = int(quantity or 0)
        if quantity <= 0:
            continue

        item = order.find_item(order_item_id)
        if item is None:
            raise ValidationError({"items": [f"Item {order_item_id} does not belong to this order"]})

        remaining = order.remaining_quantity_to_ship(item, shipped)
        if quantity > remaining:
            raise ValidationError(
                {"items": [f"Cannot ship {quantity} of {item.sku}, only {remaining} left to ship"]}
            )

        lines.append(
            {
                "order_item_id": item.id,
                "product_id": item.product_id,
                "sku": item.sku,
                "name": item.name,
                "quantity": quantity,
            }
        )
    return lines


@sales.command_handler(part_of=Shipment)
class CreateShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        shipped = shipped_quantities(order.id)
        if not order.can_be_shipped(shipped):
            raise ValidationError({"status": [f"Order {order.order_number} cannot be shipped"]})

        requested = json.loads(command.items) if isinstance(command.items, str) else command.items
        lines = _shipment_lines(order, requested or {}, shipped)
        if not lines:
            raise ValidationError({"items": ["Select at least one item to ship"]})

        repo = current_domain.repository_for(Shipment)
        shipment = Shipment.create(
            order.id,
            lines,
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            notes=command.notes,
            shipment_number=unused_number(repo._dao.query, "shipment_number", generate_shipment_number),
        )
        repo.add(shipment)

        logger.info(
            "Shipment created",
            shipment_id=str(shipment.id),
            shipment_number=shipment.shipment_number,
            order_id=str(order.id),
            quantity=shipment.total_quantity,
        )
        return str(shipment.id)
