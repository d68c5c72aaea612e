"""Invoice creation: command and handler."""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.invoice.invoice import Invoice, invoice_number_prefix, next_invoice_number
from sales.invoice.queries import order_has_invoice
from sales.order.order import Order, OrderStatus
from sales.settings import invoice_due_days

logger = structlog.get_logger(__name__)


@sales.command(part_of="Invoice")
class CreateInvoice:
    order_id = Identifier(required=True)
    notes = Text()


@sales.command_handler(part_of=Invoice)
class CreateInvoiceHandler:
    @handle(CreateInvoice)
    def create_invoice(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if order.status == OrderStatus.CANCELLED.value:
            raise ValidationError({"status": ["Cannot invoice a cancelled order"]})
        if order_has_invoice(order.id):
            raise ValidationError({"order_id": [f"Order {order.order_number} already has an invoice"]})

        repo = current_domain.repository_for(Invoice)
        now = datetime.now(UTC)
        prefix = invoice_number_prefix(now)
        latest = (
            repo._dao.query.filter(invoice_number__gte=prefix, invoice_number__lte=f"{prefix}99999")
            .order_by("-invoice_number")
            .limit(1)
            .all()
            .first
        )
        existing = [latest.invoice_number] if latest else []

        invoice = Invoice.create(
            order,
            next_invoice_number(existing, now),
            due_days=invoice_due_days(),
            notes=command.notes,
        )
        repo.add(invoice)

        logger.info(
            "Invoice created",
            invoice_id=str(invoice.id),
            invoice_number=invoice.invoice_number,
            order_id=str(order.id),
        )
        return str(invoice.id)
