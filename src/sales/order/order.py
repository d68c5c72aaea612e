"""Order aggregate (CQRS): the core of the sales domain.

An order snapshots the cart at checkout: items, addresses and totals are
fixed once placed. Two independent state machines run side by side, the
fulfilment ``status`` and the ``payment_status``. Every change to either is
recorded in the order history.

State Machine:
    PENDING → PROCESSING → COMPLETED → REFUNDED
    PENDING/PROCESSING → CANCELLED
    PENDING/PROCESSING → FAILED → PENDING (retry)

Money conservation:
    total = subtotal + tax_amount + shipping_amount - discount_amount
    0 <= total_refunded <= total

Stock leaves the shelf once, when the order first enters PROCESSING, and is
only put back by a cancellation if it actually left.
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from sales.domain import sales
from sales.order.events import (
    OrderCancelled,
    OrderCommentAdded,
    OrderInventoryDeducted,
    OrderInventoryRestored,
    OrderPaymentStatusChanged,
    OrderPlaced,
    OrderRefundRecorded,
    OrderStatusChanged,
)
from sales.settings import money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


# State machine transition maps
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.FAILED},
    OrderStatus.PROCESSING: {
        OrderStatus.COMPLETED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
        OrderStatus.FAILED,
    },
    OrderStatus.COMPLETED: {OrderStatus.REFUNDED},
    OrderStatus.FAILED: {OrderStatus.PENDING, OrderStatus.CANCELLED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

_VALID_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.PAID},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# States from which cancellation is allowed
_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}

# States from which items can still be shipped
_SHIPPABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}

_ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "company",
    "address_line_1",
    "address_line_2",
    "city",
    "state",
    "postal_code",
    "country",
    "phone",
)


def generate_order_number():
    return f"ORD-{uuid4().hex[:8].upper()}"


def distribute(amount, weights):
    """Split ``amount`` pro rata over ``weights``.

    Shares are rounded to cents and the rounding remainder lands on the last
    share, so the shares always add back up to ``amount``.
    """
    if not weights:
        return []
    total_weight = sum(weights)
    if not amount or total_weight <= 0:
        return [0.0] * len(weights)

    shares = [money(amount * weight / total_weight) for weight in weights[:-1]]
    shares.append(money(amount - sum(shares)))
    return shares


def _parse(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError({field: [f"Unknown {field.replace('_', ' ')}: {value}"]})


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@sales.value_object(part_of="Order")
class OrderAddress:
    """A delivery or billing address captured at checkout time.

    Once recorded on an Order, the address is immutable. It represents where
    the order was shipped, regardless of later changes to the customer's
    address book.
    """

    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    company = String(max_length=255)
    address_line_1 = String(required=True, max_length=255)
    address_line_2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    phone = String(max_length=20)

    @classmethod
    def from_dict(cls, data):
        return cls(**{k: v for k, v in (data or {}).items() if k in _ADDRESS_FIELDS})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@sales.entity(part_of="Order")
class OrderItem:
    """A purchased product with its price, quantity and share of tax and discount."""

    product_id = Identifier(required=True)
    sku = String(required=True, max_length=64)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    tax_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    row_total = Float(default=0.0)


@sales.entity(part_of="Order")
class OrderHistory:
    """One entry in the order's audit trail."""

    status_from = String(max_length=20)
    status_to = String(max_length=20)
    payment_status_from = String(max_length=20)
    payment_status_to = String(max_length=20)
    comment = Text()
    customer_notified = Boolean(default=False)
    visible_to_customer = Boolean(default=True)
    created_at = DateTime()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@sales.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier()  # Nullable for guest checkouts
    customer_email = String(required=True, max_length=254)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(max_length=50)
    shipping_method = String(max_length=50)
    shipping_address = ValueObject(OrderAddress)
    billing_address = ValueObject(OrderAddress)
    subtotal = Float(default=0.0)
    tax_amount = Float(default=0.0)
    shipping_amount = Float(default=0.0)
    discount_amount = Float(default=0.0)
    total = Float(default=0.0)
    total_refunded = Float(default=0.0)
    currency = String(max_length=3, default="USD")
    coupon_code = String(max_length=50)
    inventory_deducted = Boolean(default=False)
    notes = Text()
    items = HasMany(OrderItem)
    history = HasMany(OrderHistory)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def refunds_cannot_exceed_total(self):
        if money(self.total_refunded) > money(self.total):
            raise ValidationError({"refund": ["Refund amount exceeds maximum refundable amount"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        customer_email,
        items_data,
        shipping_address,
        tax_amount,
        customer_id=None,
        billing_address=None,
        shipping_method=None,
        payment_method=None,
        shipping_amount=0.0,
        discount_amount=0.0,
        coupon_code=None,
        currency="USD",
        notes=None,
        order_number=None,
    ):
        """Create a pending order.

        Args:
            customer_email: Where order mail goes; required for guests too.
            items_data: List of dicts with product_id, sku, name, price, quantity.
            shipping_address: Dict of OrderAddress fields.
            tax_amount: Order-level tax, spread pro rata over the lines.
            billing_address: Dict of OrderAddress fields; defaults to shipping.
            discount_amount: Order-level discount, spread like tax.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        row_totals = [money(item["price"] * item["quantity"]) for item in items_data]
        subtotal = money(sum(row_totals))
        tax_amount = money(tax_amount)
        shipping_amount = money(shipping_amount)
        discount_amount = money(discount_amount)
        item_taxes = distribute(tax_amount, row_totals)
        item_discounts = distribute(discount_amount, row_totals)

        order = cls(
            order_number=order_number or generate_order_number(),
            customer_id=customer_id,
            customer_email=customer_email,
            payment_method=payment_method,
            shipping_method=shipping_method,
            shipping_address=OrderAddress.from_dict(shipping_address),
            billing_address=OrderAddress.from_dict(billing_address or shipping_address),
            subtotal=subtotal,
            tax_amount=tax_amount,
            shipping_amount=shipping_amount,
            discount_amount=discount_amount,
            total=money(subtotal + tax_amount + shipping_amount - discount_amount),
            currency=currency,
            coupon_code=coupon_code,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        for data, row_total, item_tax, item_discount in zip(items_data, row_totals, item_taxes, item_discounts):
            order.add_items(
                OrderItem(
                    product_id=data["product_id"],
                    sku=data["sku"],
                    name=data["name"],
                    price=data["price"],
                    quantity=data["quantity"],
                    tax_amount=item_tax,
                    discount_amount=item_discount,
                    row_total=row_total,
                )
            )

        order._record_history(
            "Order created",
            status_to=OrderStatus.PENDING.value,
            payment_status_to=PaymentStatus.PENDING.value,
        )

        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order.order_number,
                customer_id=customer_id,
                customer_email=customer_email,
                items=json.dumps(
                    [
                        {
                            "item_id": str(item.id),
                            "product_id": str(item.product_id),
                            "sku": item.sku,
                            "quantity": item.quantity,
                            "price": item.price,
                        }
                        for item in order.items
                    ]
                ),
                subtotal=order.subtotal,
                tax_amount=order.tax_amount,
                shipping_amount=order.shipping_amount,
                discount_amount=order.discount_amount,
                total=order.total,
                currency=order.currency,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def max_refundable(self):
        return max(0.0, money(self.total - (self.total_refunded or 0.0)))

    @property
    def can_be_cancelled(self):
        return OrderStatus(self.status) in _CANCELLABLE_STATES

    @property
    def is_paid(self):
        return self.payment_status == PaymentStatus.PAID.value

    @property
    def items_count(self):
        return sum(item.quantity for item in self.items)

    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def remaining_quantity_to_ship(self, item, shipped_quantities):
        """Ordered quantity of ``item`` not yet on a live shipment."""
        return max(0, item.quantity - shipped_quantities.get(str(item.id), 0))

    def can_be_shipped(self, shipped_quantities):
        if not self.is_paid or OrderStatus(self.status) not in _SHIPPABLE_STATES:
            return False
        return any(self.remaining_quantity_to_ship(item, shipped_quantities) > 0 for item in self.items)

    def customer_history(self):
        return [entry for entry in self.history if entry.visible_to_customer]

    def _stock_lines(self):
        return json.dumps(
            [{"product_id": str(item.product_id), "sku": item.sku, "quantity": item.quantity} for item in self.items]
        )

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_can_transition_payment(self, target_status):
        current = PaymentStatus(self.payment_status)
        if target_status not in _VALID_PAYMENT_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"status": [f"Cannot transition payment from {current.value} to {target_status.value}"]}
            )

    def _record_history(self, comment, notify_customer=False, visible_to_customer=True, **changes):
        now = datetime.now(UTC)
        self.add_history(
            OrderHistory(
                comment=comment,
                customer_notified=notify_customer,
                visible_to_customer=visible_to_customer,
                created_at=now,
                **changes,
            )
        )
        self.updated_at = now

    # -------------------------------------------------------------------
    # Order lifecycle
    # -------------------------------------------------------------------
    def update_status(self, status, comment=None, notify_customer=False):
        """Move the order to ``status``. Returns False when nothing changed."""
        target = _parse(OrderStatus, status, "status")
        if target.value == self.status:
            return False

        if target == OrderStatus.CANCELLED:
            return self.cancel(comment or "Cancelled by status update")

        self._assert_can_transition(target)
        previous = self.status
        self.status = target.value
        if target == OrderStatus.PROCESSING:
            self._deduct_inventory()

        self._record_history(
            comment or f"Status changed from {previous} to {target.value}",
            notify_customer=notify_customer,
            status_from=previous,
            status_to=target.value,
        )
        self.raise_(
            OrderStatusChanged(
                order_id=self.id,
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_at=self.updated_at,
            )
        )
        return True

    def update_payment_status(self, payment_status, comment=None):
        """Move the payment to ``payment_status``. Returns False when nothing changed.

        A pending order whose payment arrives starts processing.
        """
        target = _parse(PaymentStatus, payment_status, "payment_status")
        if target.value == self.payment_status:
            return False

        self._assert_can_transition_payment(target)
        previous = self.payment_status
        self.payment_status = target.value

        self._record_history(
            comment or f"Payment status changed from {previous} to {target.value}",
            payment_status_from=previous,
            payment_status_to=target.value,
        )
        self.raise_(
            OrderPaymentStatusChanged(
                order_id=self.id,
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_at=self.updated_at,
            )
        )

        if target == PaymentStatus.PAID and self.status == OrderStatus.PENDING.value:
            self.update_status(OrderStatus.PROCESSING.value, comment="Payment received")
        return True

    def _deduct_inventory(self):
        if self.inventory_deducted:
            return

        self.inventory_deducted = True
        self.raise_(
            OrderInventoryDeducted(
                order_id=self.id,
                order_number=self.order_number,
                items=self._stock_lines(),
                deducted_at=datetime.now(UTC),
            )
        )

    def cancel(self, reason, restore_stock=True):
        """Cancel the order. Cancelling a cancelled order is a no-op."""
        if self.status == OrderStatus.CANCELLED.value:
            return False
        if not self.can_be_cancelled:
            raise ValidationError({"status": [f"Cannot cancel an order that is {self.status}"]})

        previous = self.status
        self.status = OrderStatus.CANCELLED.value
        self._record_history(
            f"Order cancelled. Reason: {reason}",
            status_from=previous,
            status_to=OrderStatus.CANCELLED.value,
        )

        if restore_stock and self.inventory_deducted:
            self.inventory_deducted = False
            self.raise_(
                OrderInventoryRestored(
                    order_id=self.id,
                    order_number=self.order_number,
                    items=self._stock_lines(),
                    reason=reason,
                    restored_at=self.updated_at,
                )
            )

        self.raise_(
            OrderCancelled(
                order_id=self.id,
                order_number=self.order_number,
                reason=reason,
                cancelled_at=self.updated_at,
            )
        )
        return True

    def add_comment(self, comment, notify_customer=False, visible_to_customer=True):
        self._record_history(
            comment,
            notify_customer=notify_customer,
            visible_to_customer=visible_to_customer,
        )
        self.raise_(
            OrderCommentAdded(
                order_id=self.id,
                comment=comment,
                customer_notified=notify_customer,
                visible_to_customer=visible_to_customer,
            )
        )

    # -------------------------------------------------------------------
    # Refunds
    # -------------------------------------------------------------------
    def record_refund(self, amount, credit_memo_id):
        """Book ``amount`` against the order's refundable balance.

        The ceiling is checked here as well as when the credit memo is
        created, because another refund may have landed in between.
        """
        amount = money(amount)
        if amount <= 0:
            raise ValidationError({"amount": ["Refund amount must be greater than zero"]})
        if amount > self.max_refundable:
            raise ValidationError({"refund": ["Refund amount exceeds maximum refundable amount"]})

        self.total_refunded = money((self.total_refunded or 0.0) + amount)
        fully_refunded = self.max_refundable == 0
        self._record_history(f"Refunded {amount:.2f} {self.currency} via credit memo", visible_to_customer=True)

        if fully_refunded:
            if PaymentStatus.REFUNDED in _VALID_PAYMENT_TRANSITIONS[PaymentStatus(self.payment_status)]:
                self.update_payment_status(PaymentStatus.REFUNDED.value, comment="Order fully refunded")
            if OrderStatus.REFUNDED in _VALID_TRANSITIONS[OrderStatus(self.status)]:
                self.update_status(OrderStatus.REFUNDED.value, comment="Order fully refunded")

        self.raise_(
            OrderRefundRecorded(
                order_id=self.id,
                credit_memo_id=credit_memo_id,
                amount=amount,
                total_refunded=self.total_refunded,
                fully_refunded=fully_refunded,
            )
        )
