"""Shipment updates and lifecycle: commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@sales.command(part_of="Shipment")
class UpdateShipment:
    shipment_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_number = String(max_length=100)
    tracking_url = String(max_length=500)
    notes = Text()


@sales.command(part_of="Shipment")
class UpdateTracking:
    shipment_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    carrier = String(max_length=100)
    tracking_url = String(max_length=500)


@sales.command(part_of="Shipment")
class MarkShipped:
    shipment_id = Identifier(required=True)


@sales.command(part_of="Shipment")
class UpdateShipmentStatus:
    shipment_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@sales.command(part_of="Shipment")
class CancelShipment:
    shipment_id = Identifier(required=True)
    reason = String(max_length=500)


@sales.command_handler(part_of=Shipment)
class ShipmentLifecycleHandler:
    @handle(UpdateShipment)
    def update_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.update_details(
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            tracking_url=command.tracking_url,
            notes=command.notes,
        )
        repo.add(shipment)

    @handle(UpdateTracking)
    def update_tracking(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.update_tracking(
            command.tracking_number,
            carrier=command.carrier,
            tracking_url=command.tracking_url,
        )
        repo.add(shipment)

    @handle(MarkShipped)
    def mark_shipped(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.mark_shipped()
        repo.add(shipment)
        logger.info("Shipment dispatched", shipment_id=str(shipment.id), carrier=shipment.carrier)

    @handle(UpdateShipmentStatus)
    def update_shipment_status(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.update_status(command.status)
        repo.add(shipment)

    @handle(CancelShipment)
    def cancel_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.shipment_id)
        shipment.cancel(command.reason)
        repo.add(shipment)
        logger.info("Shipment cancelled", shipment_id=str(shipment.id), reason=command.reason)
