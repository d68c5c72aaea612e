"""Domain events for the Shipment aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from sales.domain import sales


@sales.event(part_of="Shipment")
class ShipmentCreated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    shipment_number = String(required=True)
    total_quantity = Integer(required=True)
    created_at = DateTime(required=True)


@sales.event(part_of="Shipment")
class ShipmentUpdated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)


@sales.event(part_of="Shipment")
class ShipmentTrackingUpdated:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String(required=True)
    tracking_url = String()


@sales.event(part_of="Shipment")
class ShipmentStatusChanged:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)


@sales.event(part_of="Shipment")
class ShipmentCancelled:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String()
    cancelled_at = DateTime(required=True)
