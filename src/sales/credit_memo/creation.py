"""Credit memo creation: command and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain
from shared.queries import unused_number

from sales.credit_memo.credit_memo import CreditMemo, generate_credit_memo_number
from sales.credit_memo.queries import refunded_quantities
from sales.credit_memo.refund import apply_refund
from sales.domain import sales
from sales.order.order import Order
from sales.settings import money

logger = structlog.get_logger(__name__)


@sales.command(part_of="CreditMemo")
class CreateCreditMemo:
    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: {"<order_item_id>": {"qty": int, "restore_stock": bool}}
    refund_shipping = Float(default=0.0, min_value=0.0)
    adjustment_positive = Float(default=0.0, min_value=0.0)
    adjustment_negative = Float(default=0.0, min_value=0.0)
    refund_method = String(max_length=20)
    notes = Text()
    process_refund = Boolean(default=False)
    restore_inventory = Boolean(default=False)


def _memo_lines(order, requested):
    """Turn the request into memo lines, skipping anything that cannot be refunded."""
    refunded = refunded_quantities(order.id)
    lines = []
    for order_item_id, request in requested.items():
        if not isinstance(request, dict):
            request = {"qty": request}
        quantity = int(request.get("qty") or 0)

        item = order.find_item(order_item_id)
        if item is None or quantity <= 0:
            continue
        if quantity > item.quantity - refunded.get(str(item.id), 0):
            continue

        lines.append(
            {
                "order_item_id": item.id,
                "product_id": item.product_id,
                "sku": item.sku,
                "name": item.name,
                "price": item.price,
                "quantity": quantity,
                "tax_amount": money(item.tax_amount / item.quantity * quantity),
                "discount_amount": money(item.discount_amount / item.quantity * quantity),
                "row_total": money(
                    item.price * quantity
                    + item.tax_amount / item.quantity * quantity
                    - item.discount_amount / item.quantity * quantity
                ),
                "restore_stock": bool(request.get("restore_stock")),
            }
        )
    return lines


@sales.command_handler(part_of=CreditMemo)
class CreateCreditMemoHandler:
    @handle(CreateCreditMemo)
    def create_credit_memo(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        if not order.is_paid:
            raise ValidationError({"status": ["Credit memos can only be created for paid orders"]})

        requested = json.loads(command.items) if isinstance(command.items, str) else command.items
        lines = _memo_lines(order, requested or {})
        if not lines:
            raise ValidationError({"items": ["Select at least one refundable item"]})

        memo_repo = current_domain.repository_for(CreditMemo)
        memo = CreditMemo.create(
            order,
            lines,
            refund_shipping=command.refund_shipping or 0.0,
            adjustment_positive=command.adjustment_positive or 0.0,
            adjustment_negative=command.adjustment_negative or 0.0,
            refund_method=command.refund_method,
            notes=command.notes,
            credit_memo_number=unused_number(memo_repo._dao.query, "credit_memo_number", generate_credit_memo_number),
        )
        memo.assert_within(order.max_refundable)

        if command.process_refund:
            apply_refund(memo, order)
            order_repo.add(order)
        if command.restore_inventory:
            memo.restore_inventory()

        memo_repo.add(memo)

        logger.info(
            "Credit memo created",
            credit_memo_id=str(memo.id),
            credit_memo_number=memo.credit_memo_number,
            order_id=str(order.id),
            grand_total=memo.grand_total,
            refunded=memo.is_refunded,
        )
        return str(memo.id)
