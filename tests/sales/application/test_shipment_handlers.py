"""Application tests for shipment commands."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from sales.order.order import Order
from sales.shipment.creation import CreateShipment
from sales.shipment.lifecycle import CancelShipment, MarkShipped, UpdateShipmentStatus, UpdateTracking
from sales.shipment.queries import shipment_statistics, shipped_quantities
from sales.shipment.shipment import Shipment


def _item_id(order_id):
    return str(current_domain.repository_for(Order).get(order_id).items[0].id)


def _ship(order_id, quantity, **kwargs):
    return current_domain.process(
        CreateShipment(order_id=order_id, items=json.dumps({_item_id(order_id): quantity}), **kwargs),
        asynchronous=False,
    )


class TestCreateShipment:
    def test_partial_shipments(self, paid_order):
        order_id = paid_order(quantity=3)
        _ship(order_id, 2, carrier="UPS")
        _ship(order_id, 1)
        assert shipped_quantities(order_id) == {_item_id(order_id): 3}

    def test_cannot_ship_more_than_ordered(self, paid_order):
        order_id = paid_order(quantity=2)
        _ship(order_id, 1)
        with pytest.raises(ValidationError) as exc:
            _ship(order_id, 2)
        assert "items" in exc.value.messages

    def test_unpaid_order(self, place_order):
        with pytest.raises(ValidationError) as exc:
            _ship(place_order(), 1)
        assert "status" in exc.value.messages

    def test_fully_shipped_order(self, paid_order):
        order_id = paid_order(quantity=1)
        _ship(order_id, 1)
        with pytest.raises(ValidationError) as exc:
            _ship(order_id, 1)
        assert "status" in exc.value.messages

    def test_foreign_item(self, paid_order):
        order_id = paid_order()
        with pytest.raises(ValidationError) as exc:
            current_domain.process(
                CreateShipment(order_id=order_id, items=json.dumps({"not-mine": 1})),
                asynchronous=False,
            )
        assert "items" in exc.value.messages

    def test_nothing_selected(self, paid_order):
        order_id = paid_order()
        with pytest.raises(ValidationError) as exc:
            _ship(order_id, 0)
        assert "items" in exc.value.messages

    def test_cancelled_shipment_frees_quantity(self, paid_order):
        order_id = paid_order(quantity=2)
        shipment_id = _ship(order_id, 2)
        current_domain.process(CancelShipment(shipment_id=shipment_id, reason="Box damaged"), asynchronous=False)
        _ship(order_id, 2)
        assert shipped_quantities(order_id) == {_item_id(order_id): 2}


class TestShipmentLifecycle:
    def test_dispatch_and_deliver(self, paid_order):
        shipment_id = _ship(paid_order(), 2)
        current_domain.process(
            UpdateTracking(shipment_id=shipment_id, tracking_number="1Z999", carrier="UPS"),
            asynchronous=False,
        )
        current_domain.process(MarkShipped(shipment_id=shipment_id), asynchronous=False)
        current_domain.process(UpdateShipmentStatus(shipment_id=shipment_id, status="delivered"), asynchronous=False)

        shipment = current_domain.repository_for(Shipment).get(shipment_id)
        assert shipment.status == "delivered"
        assert shipment.tracking_number == "1Z999"

    def test_statistics(self, paid_order):
        first = _ship(paid_order(), 2)
        _ship(paid_order(), 1)
        current_domain.process(MarkShipped(shipment_id=first), asynchronous=False)

        statistics = shipment_statistics()
        assert statistics["total"] == 2
        assert statistics["pending"] == 1
        assert statistics["shipped"] == 1
        assert statistics["delivered"] == 0

    def test_statistics_count_every_row(self):
        repo = current_domain.repository_for(Shipment)
        for index in range(105):
            repo.add(
                Shipment.create(
                    "order-bulk",
                    [{"order_item_id": "item-1", "product_id": "prod-1", "sku": "A", "name": "Alpha", "quantity": 1}],
                    shipment_number=f"SHP-BULK-{index:05d}",
                )
            )

        statistics = shipment_statistics()
        assert statistics["total"] == 105
        assert statistics["pending"] == 105
