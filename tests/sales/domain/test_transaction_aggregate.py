"""Tests for the Transaction aggregate."""

import pytest
from protean.exceptions import ValidationError
from sales.transaction.events import TransactionCompleted, TransactionFailed, TransactionRecorded
from sales.transaction.transaction import Transaction, TransactionStatus


def _payment(**overrides):
    fields = {"order_id": "order-001", "transaction_type": "payment", "amount": 115.0, "gateway": "stripe"}
    fields.update(overrides)
    return Transaction.record(**fields)


class TestRecording:
    def test_pending_payment(self):
        payment = _payment()
        assert payment.status == TransactionStatus.PENDING.value
        assert payment.transaction_number.startswith("TXN-")
        assert payment.processed_at is None
        assert isinstance(payment._events[-1], TransactionRecorded)

    def test_completed_payment_is_processed(self):
        payment = _payment(status="completed")
        assert payment.processed_at is not None
        assert payment.can_be_refunded

    def test_response_data_round_trip(self):
        payment = _payment(response_data={"charge": "ch_123"})
        assert payment.response() == {"charge": "ch_123"}

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            _payment(transaction_type="barter")


class TestLifecycle:
    def test_complete_merges_response(self):
        payment = _payment(response_data={"charge": "ch_123"})
        payment.mark_completed({"captured": True})
        assert payment.response() == {"charge": "ch_123", "captured": True}
        assert isinstance(payment._events[-1], TransactionCompleted)

    def test_completed_is_terminal(self):
        payment = _payment(status="completed")
        with pytest.raises(ValidationError):
            payment.mark_failed("Late decline")

    def test_fail_then_retry(self):
        payment = _payment()
        payment.mark_failed("Card declined")
        assert "Failed: Card declined" in payment.notes
        assert isinstance(payment._events[-1], TransactionFailed)
        payment.retry()
        assert payment.status == "pending"

    def test_failed_refund_is_not_retried(self):
        refund = _payment(transaction_type="refund")
        refund.mark_failed("Gateway timeout")
        assert not refund.can_be_retried
        with pytest.raises(ValidationError):
            refund.retry()

    def test_cancel_pending(self):
        payment = _payment()
        payment.cancel()
        assert payment.status == "cancelled"

    def test_authorization_cannot_be_refunded(self):
        assert not _payment(transaction_type="authorization", status="completed").can_be_refunded

    def test_pending_payment_cannot_be_refunded(self):
        assert not _payment().can_be_refunded
