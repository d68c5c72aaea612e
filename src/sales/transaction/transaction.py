"""Transaction aggregate (CQRS): a payment-gateway movement of money.

Payments, captures and authorizations come in from checkout or gateway
webhooks. Refunds are child transactions of the payment they return money
from, and never add up to more than that payment.

State Machine:
    PENDING → COMPLETED | FAILED | CANCELLED
    FAILED → PENDING (retry, payments and captures only)
"""

import json
import random
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text

from sales.domain import sales
from sales.transaction.events import (
    TransactionCancelled,
    TransactionCompleted,
    TransactionFailed,
    TransactionRecorded,
    TransactionRetried,
)


class TransactionType(Enum):
    PAYMENT = "payment"
    REFUND = "refund"
    AUTHORIZATION = "authorization"
    CAPTURE = "capture"


class TransactionStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


_VALID_TRANSITIONS = {
    TransactionStatus.PENDING: {
        TransactionStatus.COMPLETED,
        TransactionStatus.FAILED,
        TransactionStatus.CANCELLED,
    },
    TransactionStatus.FAILED: {TransactionStatus.PENDING},
    TransactionStatus.COMPLETED: set(),  # Terminal
    TransactionStatus.CANCELLED: set(),  # Terminal
}

_RETRYABLE_TYPES = {TransactionType.PAYMENT, TransactionType.CAPTURE}


def generate_transaction_number(moment=None):
    moment = moment or datetime.now(UTC)
    return f"TXN-{moment:%Y%m%d}-{random.randint(0, 999999):06d}"


@sales.aggregate
class Transaction:
    transaction_number = String(required=True, max_length=30, unique=True)
    order_id = Identifier(required=True)
    credit_memo_id = Identifier()
    parent_transaction_id = Identifier()
    type = String(choices=TransactionType, required=True)
    status = String(choices=TransactionStatus, default=TransactionStatus.PENDING.value)
    gateway = String(max_length=50)
    gateway_transaction_id = String(max_length=255)
    amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")
    response_data = Text()  # JSON object
    notes = Text()
    processed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def record(
        cls,
        order_id,
        transaction_type,
        amount,
        status=TransactionStatus.PENDING.value,
        gateway=None,
        gateway_transaction_id=None,
        currency="USD",
        response_data=None,
        notes=None,
        credit_memo_id=None,
        parent_transaction_id=None,
        transaction_number=None,
    ):
        now = datetime.now(UTC)
        transaction = cls(
            transaction_number=transaction_number or generate_transaction_number(now),
            order_id=order_id,
            credit_memo_id=credit_memo_id,
            parent_transaction_id=parent_transaction_id,
            type=transaction_type,
            status=status,
            gateway=gateway,
            gateway_transaction_id=gateway_transaction_id,
            amount=amount,
            currency=currency,
            response_data=json.dumps(response_data) if response_data else None,
            notes=notes,
            processed_at=now if status == TransactionStatus.COMPLETED.value else None,
            created_at=now,
            updated_at=now,
        )
        transaction.raise_(
            TransactionRecorded(
                transaction_id=transaction.id,
                transaction_number=transaction.transaction_number,
                order_id=order_id,
                transaction_type=transaction_type,
                status=transaction.status,
                amount=amount,
                gateway=gateway,
            )
        )
        return transaction

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def response(self):
        return json.loads(self.response_data) if self.response_data else {}

    @property
    def is_completed(self):
        return self.status == TransactionStatus.COMPLETED.value

    @property
    def can_be_refunded(self):
        return self.is_completed and self.type == TransactionType.PAYMENT.value

    @property
    def can_be_retried(self):
        return self.status == TransactionStatus.FAILED.value and TransactionType(self.type) in _RETRYABLE_TYPES

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = TransactionStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def mark_completed(self, response_data=None):
        self._assert_can_transition(TransactionStatus.COMPLETED)
        now = datetime.now(UTC)
        self.status = TransactionStatus.COMPLETED.value
        if response_data:
            self.response_data = json.dumps({**self.response(), **response_data})
        self.processed_at = now
        self.updated_at = now

        self.raise_(
            TransactionCompleted(
                transaction_id=self.id,
                order_id=self.order_id,
                transaction_type=self.type,
                amount=self.amount,
                processed_at=now,
            )
        )

    def mark_failed(self, reason):
        self._assert_can_transition(TransactionStatus.FAILED)
        self.status = TransactionStatus.FAILED.value
        self.notes = "\n".join(filter(None, [self.notes, f"Failed: {reason}"]))
        self.updated_at = datetime.now(UTC)

        self.raise_(TransactionFailed(transaction_id=self.id, order_id=self.order_id, reason=reason))

    def retry(self):
        if not self.can_be_retried:
            raise ValidationError({"status": ["Only failed payments and captures can be retried"]})

        self.status = TransactionStatus.PENDING.value
        self.processed_at = None
        self.updated_at = datetime.now(UTC)

        self.raise_(TransactionRetried(transaction_id=self.id, order_id=self.order_id))

    def cancel(self):
        self._assert_can_transition(TransactionStatus.CANCELLED)
        self.status = TransactionStatus.CANCELLED.value
        self.updated_at = datetime.now(UTC)

        self.raise_(TransactionCancelled(transaction_id=self.id, order_id=self.order_id))
