"""Transactions react to credit memo refunds."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from sales.credit_memo.events import CreditMemoRefunded
from sales.domain import sales
from sales.settings import money
from sales.transaction.queries import completed_payment, refundable_amount
from sales.transaction.refund import refund_payment
from sales.transaction.transaction import Transaction

logger = structlog.get_logger(__name__)


@sales.event_handler(part_of=Transaction, stream_category="sales::credit_memo")
class CreditMemoRefundEventHandler:
    """Queues a gateway refund for every processed credit memo."""

    @handle(CreditMemoRefunded)
    def on_credit_memo_refunded(self, event: CreditMemoRefunded) -> None:
        payment = completed_payment(event.order_id)
        if payment is None:
            logger.info(
                "No completed payment to refund against",
                credit_memo_id=str(event.credit_memo_id),
                order_id=str(event.order_id),
            )
            return

        amount = min(money(event.amount), refundable_amount(payment))
        if amount <= 0:
            logger.warning(
                "Payment already fully refunded",
                credit_memo_id=str(event.credit_memo_id),
                transaction_id=str(payment.id),
            )
            return

        refund = refund_payment(
            payment,
            amount,
            credit_memo_id=str(event.credit_memo_id),
            reason=f"Credit memo refund ({event.refund_method})",
        )
        current_domain.repository_for(Transaction).add(refund)

        logger.info(
            "Refund transaction queued for credit memo",
            credit_memo_id=str(event.credit_memo_id),
            transaction_id=str(refund.id),
            amount=amount,
        )
