"""Recording payments and gateway callbacks: commands and handler."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.order.order import Order
from sales.transaction.queries import find_by_gateway_reference, new_transaction_number
from sales.transaction.transaction import Transaction, TransactionStatus, TransactionType

logger = structlog.get_logger(__name__)


@sales.command(part_of="Transaction")
class RecordTransaction:
    order_id = Identifier(required=True)
    transaction_type = String(required=True, max_length=20)
    amount = Float(required=True, min_value=0.0)
    status = String(max_length=20, default=TransactionStatus.PENDING.value)
    gateway = String(max_length=50)
    gateway_transaction_id = String(max_length=255)
    response_data = Text()  # JSON object
    notes = Text()
    credit_memo_id = Identifier()
    parent_transaction_id = Identifier()


@sales.command(part_of="Transaction")
class RecordPaymentIfMissing:
    order_id = Identifier(required=True)
    gateway = String(required=True, max_length=50)
    gateway_transaction_id = String(required=True, max_length=255)
    amount = Float(required=True, min_value=0.0)
    status = String(max_length=20, default=TransactionStatus.COMPLETED.value)


@sales.command(part_of="Transaction")
class LogWebhookTransaction:
    order_id = Identifier(required=True)
    gateway = String(required=True, max_length=50)
    gateway_transaction_id = String(required=True, max_length=255)
    transaction_type = String(required=True, max_length=20)
    status = String(required=True, max_length=20)
    amount = Float(required=True, min_value=0.0)
    raw_payload = Text()  # JSON object, the webhook body as received


def _loads(value):
    return json.loads(value) if isinstance(value, str) and value else value


def _order_currency(order_id):
    return current_domain.repository_for(Order).get(str(order_id)).currency


@sales.command_handler(part_of=Transaction)
class RecordTransactionHandler:
    @handle(RecordTransaction)
    def record_transaction(self, command):
        transaction = Transaction.record(
            transaction_number=new_transaction_number(),
            order_id=command.order_id,
            transaction_type=command.transaction_type,
            amount=command.amount,
            status=command.status,
            gateway=command.gateway,
            gateway_transaction_id=command.gateway_transaction_id,
            currency=_order_currency(command.order_id),
            response_data=_loads(command.response_data),
            notes=command.notes,
            credit_memo_id=command.credit_memo_id,
            parent_transaction_id=command.parent_transaction_id,
        )
        current_domain.repository_for(Transaction).add(transaction)
        return str(transaction.id)

    @handle(RecordPaymentIfMissing)
    def record_payment_if_missing(self, command):
        existing = find_by_gateway_reference(
            command.gateway_transaction_id,
            order_id=command.order_id,
            gateway=command.gateway,
        )
        if existing is not None:
            return str(existing.id)

        transaction = Transaction.record(
            transaction_number=new_transaction_number(),
            order_id=command.order_id,
            transaction_type=TransactionType.PAYMENT.value,
            amount=command.amount,
            status=command.status,
            gateway=command.gateway,
            gateway_transaction_id=command.gateway_transaction_id,
            currency=_order_currency(command.order_id),
        )
        current_domain.repository_for(Transaction).add(transaction)
        logger.info(
            "Payment recorded",
            transaction_id=str(transaction.id),
            order_id=str(command.order_id),
            gateway=command.gateway,
        )
        return str(transaction.id)

    @handle(LogWebhookTransaction)
    def log_webhook_transaction(self, command):
        currency = _order_currency(command.order_id)
        if find_by_gateway_reference(command.gateway_transaction_id) is not None:
            raise ValidationError(
                {"gateway_transaction_id": [f"Transaction {command.gateway_transaction_id} was already logged"]}
            )

        transaction = Transaction.record(
            transaction_number=new_transaction_number(),
            order_id=command.order_id,
            transaction_type=command.transaction_type,
            amount=command.amount,
            status=command.status,
            gateway=command.gateway,
            gateway_transaction_id=command.gateway_transaction_id,
            currency=currency,
            response_data=_loads(command.raw_payload),
            notes=f"Logged from {command.gateway} webhook",
        )
        current_domain.repository_for(Transaction).add(transaction)
        logger.info(
            "Webhook transaction logged",
            transaction_id=str(transaction.id),
            gateway=command.gateway,
            gateway_transaction_id=command.gateway_transaction_id,
        )
        return str(transaction.id)
