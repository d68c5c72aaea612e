"""Transaction lookups and statistics."""

from protean.utils.globals import current_domain
from shared.queries import count, fetch_all, unused_number

from sales.settings import money
from sales.transaction.transaction import Transaction, TransactionStatus, TransactionType, generate_transaction_number


def _transactions():
    return current_domain.repository_for(Transaction)._dao.query


def new_transaction_number():
    return unused_number(_transactions(), "transaction_number", generate_transaction_number)


def order_transactions(order_id):
    return fetch_all(_transactions().filter(order_id=str(order_id)).order_by("created_at"))


def find_by_gateway_reference(gateway_transaction_id, order_id=None, gateway=None):
    criteria = {"gateway_transaction_id": gateway_transaction_id}
    if order_id is not None:
        criteria["order_id"] = str(order_id)
    if gateway is not None:
        criteria["gateway"] = gateway
    return _transactions().filter(**criteria).all().first


def refunds_of(payment):
    """Refund transactions raised against ``payment`` that may still move money."""
    return [
        transaction
        for transaction in order_transactions(payment.order_id)
        if transaction.type == TransactionType.REFUND.value
        and str(transaction.parent_transaction_id) == str(payment.id)
        and transaction.status in (TransactionStatus.PENDING.value, TransactionStatus.COMPLETED.value)
    ]


def refundable_amount(payment):
    return max(0.0, money(payment.amount - sum(refund.amount for refund in refunds_of(payment))))


def completed_payment(order_id):
    """The order's first completed payment, if any."""
    return next(
        (
            transaction
            for transaction in order_transactions(order_id)
            if transaction.type == TransactionType.PAYMENT.value and transaction.is_completed
        ),
        None,
    )


def transaction_statistics():
    query = _transactions()

    def _completed_total(kind):
        completed = query.filter(type=kind.value, status=TransactionStatus.COMPLETED.value).order_by("created_at")
        return money(sum(t.amount for t in fetch_all(completed)))

    return {
        "total": count(query),
        "by_status": {status.value: count(query.filter(status=status.value)) for status in TransactionStatus},
        "by_type": {kind.value: count(query.filter(type=kind.value)) for kind in TransactionType},
        "completed_payment_amount": _completed_total(TransactionType.PAYMENT),
        "completed_refund_amount": _completed_total(TransactionType.REFUND),
    }
