"""Invoice lifecycle: commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.invoice.invoice import Invoice

logger = structlog.get_logger(__name__)


@sales.command(part_of="Invoice")
class MarkInvoiceSent:
    invoice_id = Identifier(required=True)


@sales.command(part_of="Invoice")
class MarkInvoicePaid:
    invoice_id = Identifier(required=True)


@sales.command(part_of="Invoice")
class CancelInvoice:
    invoice_id = Identifier(required=True)
    reason = String(max_length=500)


@sales.command(part_of="Invoice")
class DeleteInvoice:
    invoice_id = Identifier(required=True)


@sales.command_handler(part_of=Invoice)
class InvoiceLifecycleHandler:
    @handle(MarkInvoiceSent)
    def mark_sent(self, command):
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        invoice.mark_sent()
        repo.add(invoice)

    @handle(MarkInvoicePaid)
    def mark_paid(self, command):
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        invoice.mark_paid()
        repo.add(invoice)
        logger.info("Invoice paid", invoice_id=str(invoice.id), order_id=str(invoice.order_id), amount=invoice.total)

    @handle(CancelInvoice)
    def cancel_invoice(self, command):
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        invoice.cancel(command.reason)
        repo.add(invoice)

    @handle(DeleteInvoice)
    def delete_invoice(self, command):
        repo = current_domain.repository_for(Invoice)
        invoice = repo.get(command.invoice_id)
        if not invoice.can_be_deleted:
            raise ValidationError({"status": ["Cannot delete a paid invoice"]})

        repo._dao.delete(invoice)
        logger.info("Invoice deleted", invoice_id=str(invoice.id), invoice_number=invoice.invoice_number)
