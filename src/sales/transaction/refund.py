"""Refunding a payment transaction: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.transaction.queries import new_transaction_number, refundable_amount, refunds_of
from sales.transaction.transaction import Transaction, TransactionType

logger = structlog.get_logger(__name__)


@sales.command(part_of="Transaction")
class RefundTransaction:
    transaction_id = Identifier(required=True)
    amount = Float(required=True, min_value=0.01)
    credit_memo_id = Identifier()
    reason = String(max_length=500)


def refund_payment(payment, amount, credit_memo_id=None, reason=None):
    """Create a pending refund against ``payment``; the caller saves it."""
    already_refunded_at_gateway = any(
        refund.gateway_transaction_id and refund.gateway_transaction_id == payment.gateway_transaction_id
        for refund in refunds_of(payment)
    )
    if not payment.can_be_refunded or already_refunded_at_gateway:
        raise ValidationError({"status": [f"Transaction {payment.transaction_number} cannot be refunded"]})

    available = refundable_amount(payment)
    if amount > available:
        raise ValidationError({"refund": [f"Refund amount exceeds the {available:.2f} left on this payment"]})

    return Transaction.record(
        transaction_number=new_transaction_number(),
        order_id=payment.order_id,
        transaction_type=TransactionType.REFUND.value,
        amount=amount,
        gateway=payment.gateway,
        currency=payment.currency,
        notes=reason,
        credit_memo_id=credit_memo_id,
        parent_transaction_id=payment.id,
    )


@sales.command_handler(part_of=Transaction)
class RefundTransactionHandler:
    @handle(RefundTransaction)
    def refund_transaction(self, command):
        repo = current_domain.repository_for(Transaction)
        payment = repo.get(command.transaction_id)
        refund = refund_payment(
            payment,
            command.amount,
            credit_memo_id=command.credit_memo_id,
            reason=command.reason,
        )
        repo.add(refund)

        logger.info(
            "Refund transaction created",
            transaction_id=str(refund.id),
            parent_transaction_id=str(payment.id),
            amount=command.amount,
        )
        return str(refund.id)
