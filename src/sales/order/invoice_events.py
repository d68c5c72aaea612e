"""Order reacts to its invoice being paid."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from sales.domain import sales
from sales.invoice.events import InvoicePaid
from sales.order.order import Order, PaymentStatus
from sales.order.status import UpdatePaymentStatus

logger = structlog.get_logger(__name__)


@sales.event_handler(part_of=Order, stream_category="sales::invoice")
class InvoicePaymentEventHandler:
    """Marks an order's payment as received once its invoice is paid."""

    @handle(InvoicePaid)
    def on_invoice_paid(self, event: InvoicePaid) -> None:
        order = current_domain.repository_for(Order).get(str(event.order_id))
        if order.payment_status not in (PaymentStatus.PENDING.value, PaymentStatus.FAILED.value):
            logger.info(
                "Invoice paid for an order that is not awaiting payment",
                order_id=str(event.order_id),
                payment_status=order.payment_status,
            )
            return

        current_domain.process(
            UpdatePaymentStatus(
                order_id=str(event.order_id),
                payment_status=PaymentStatus.PAID.value,
                comment=f"Invoice {event.invoice_number} paid",
            ),
            asynchronous=False,
        )
