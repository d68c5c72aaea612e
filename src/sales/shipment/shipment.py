"""Shipment aggregate (CQRS): a parcel carrying some or all of an order's items.

An order may ship in several parcels. Quantities on shipments that were not
cancelled count against what is left to ship.

State Machine:
    PENDING → SHIPPED → IN_TRANSIT → OUT_FOR_DELIVERY → DELIVERED
    SHIPPED → DELIVERED (carriers that skip intermediate scans)
    any non-terminal → FAILED → PENDING (re-attempt)
    any non-terminal → CANCELLED
"""

import random
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from sales.domain import sales
from sales.shipment.events import (
    ShipmentCancelled,
    ShipmentCreated,
    ShipmentStatusChanged,
    ShipmentTrackingUpdated,
    ShipmentUpdated,
)


class ShipmentStatus(Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    ShipmentStatus.PENDING: {ShipmentStatus.SHIPPED, ShipmentStatus.CANCELLED, ShipmentStatus.FAILED},
    ShipmentStatus.SHIPPED: {
        ShipmentStatus.IN_TRANSIT,
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
        ShipmentStatus.FAILED,
        ShipmentStatus.CANCELLED,
    },
    ShipmentStatus.IN_TRANSIT: {
        ShipmentStatus.OUT_FOR_DELIVERY,
        ShipmentStatus.DELIVERED,
        ShipmentStatus.FAILED,
        ShipmentStatus.CANCELLED,
    },
    ShipmentStatus.OUT_FOR_DELIVERY: {ShipmentStatus.DELIVERED, ShipmentStatus.FAILED, ShipmentStatus.CANCELLED},
    ShipmentStatus.FAILED: {ShipmentStatus.PENDING, ShipmentStatus.CANCELLED},
    ShipmentStatus.DELIVERED: set(),  # Terminal
    ShipmentStatus.CANCELLED: set(),  # Terminal
}

_EDITABLE_STATES = {ShipmentStatus.PENDING, ShipmentStatus.SHIPPED}


def generate_shipment_number(moment=None):
    moment = moment or datetime.now(UTC)
    return f"SHIP-{moment:%Y%m%d}-{random.randint(0, 999999):06d}"


@sales.entity(part_of="Shipment")
class ShipmentItem:
    order_item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=64)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)


@sales.aggregate
class Shipment:
    order_id = Identifier(required=True)
    shipment_number = String(required=True, max_length=30, unique=True)
    carrier = String(max_length=100)
    tracking_number = String(max_length=100)
    tracking_url = String(max_length=500)
    status = String(choices=ShipmentStatus, default=ShipmentStatus.PENDING.value)
    items = HasMany(ShipmentItem)
    notes = Text()
    shipped_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, order_id, items_data, carrier=None, tracking_number=None, notes=None, shipment_number=None):
        now = datetime.now(UTC)
        shipment = cls(
            order_id=order_id,
            shipment_number=shipment_number or generate_shipment_number(now),
            carrier=carrier,
            tracking_number=tracking_number,
            notes=notes,
            created_at=now,
            updated_at=now,
        )
        for data in items_data:
            shipment.add_items(ShipmentItem(**data))

        shipment.raise_(
            ShipmentCreated(
                shipment_id=shipment.id,
                order_id=order_id,
                shipment_number=shipment.shipment_number,
                total_quantity=shipment.total_quantity,
                created_at=now,
            )
        )
        return shipment

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def total_quantity(self):
        return sum(item.quantity for item in self.items)

    @property
    def is_cancelled(self):
        return self.status == ShipmentStatus.CANCELLED.value

    @property
    def can_edit(self):
        return ShipmentStatus(self.status) in _EDITABLE_STATES

    @property
    def can_cancel(self):
        return self.status not in (ShipmentStatus.DELIVERED.value, ShipmentStatus.CANCELLED.value)

    # -------------------------------------------------------------------
    # Details and tracking
    # -------------------------------------------------------------------
    def _assert_editable(self):
        if not self.can_edit:
            raise ValidationError({"status": [f"Cannot edit a shipment that is {self.status}"]})

    def update_details(self, carrier=None, tracking_number=None, tracking_url=None, notes=None):
        self._assert_editable()
        if carrier is not None:
            self.carrier = carrier
        if tracking_number is not None:
            self.tracking_number = tracking_number
        if tracking_url is not None:
            self.tracking_url = tracking_url
        if notes is not None:
            self.notes = notes
        self.updated_at = datetime.now(UTC)

        self.raise_(ShipmentUpdated(shipment_id=self.id, order_id=self.order_id))

    def update_tracking(self, tracking_number, carrier=None, tracking_url=None):
        self._assert_editable()
        self.tracking_number = tracking_number
        if carrier is not None:
            self.carrier = carrier
        if tracking_url is not None:
            self.tracking_url = tracking_url
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ShipmentTrackingUpdated(
                shipment_id=self.id,
                order_id=self.order_id,
                carrier=self.carrier,
                tracking_number=self.tracking_number,
                tracking_url=self.tracking_url,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = ShipmentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _change_status(self, target):
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        if target == ShipmentStatus.SHIPPED and self.shipped_at is None:
            self.shipped_at = now
        if target == ShipmentStatus.DELIVERED:
            self.delivered_at = now
        self.updated_at = now

        self.raise_(
            ShipmentStatusChanged(
                shipment_id=self.id,
                order_id=self.order_id,
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )

    def mark_shipped(self):
        if self.status != ShipmentStatus.PENDING.value:
            raise ValidationError({"status": ["Only pending shipments can be marked as shipped"]})
        self._change_status(ShipmentStatus.SHIPPED)

    def update_status(self, status):
        try:
            target = ShipmentStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown shipment status: {status}"]})

        if target == ShipmentStatus.CANCELLED:
            self.cancel()
            return

        self._assert_can_transition(target)
        self._change_status(target)

    def cancel(self, reason=None):
        if not self.can_cancel:
            raise ValidationError({"status": [f"Cannot cancel a shipment that is {self.status}"]})

        if reason:
            self.notes = "\n".join(filter(None, [self.notes, f"Cancellation reason: {reason}"]))
        self._change_status(ShipmentStatus.CANCELLED)

        self.raise_(
            ShipmentCancelled(
                shipment_id=self.id,
                order_id=self.order_id,
                reason=reason,
                cancelled_at=self.updated_at,
            )
        )
