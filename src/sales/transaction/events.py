"""Domain events for the Transaction aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from sales.domain import sales


@sales.event(part_of="Transaction")
class TransactionRecorded:
    __version__ = 1

    transaction_id = Identifier(required=True)
    transaction_number = String(required=True)
    order_id = Identifier(required=True)
    transaction_type = String(required=True)
    status = String(required=True)
    amount = Float(required=True)
    gateway = String()


@sales.event(part_of="Transaction")
class TransactionCompleted:
    __version__ = 1

    transaction_id = Identifier(required=True)
    order_id = Identifier(required=True)
    transaction_type = String(required=True)
    amount = Float(required=True)
    processed_at = DateTime(required=True)


@sales.event(part_of="Transaction")
class TransactionFailed:
    __version__ = 1

    transaction_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String()


@sales.event(part_of="Transaction")
class TransactionRetried:
    __version__ = 1

    transaction_id = Identifier(required=True)
    order_id = Identifier(required=True)


@sales.event(part_of="Transaction")
class TransactionCancelled:
    __version__ = 1

    transaction_id = Identifier(required=True)
    order_id = Identifier(required=True)
