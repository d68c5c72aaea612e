"""Transaction lifecycle: commands and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from sales.domain import sales
from sales.transaction.transaction import Transaction


@sales.command(part_of="Transaction")
class MarkTransactionCompleted:
    transaction_id = Identifier(required=True)
    response_data = Text()  # JSON object merged into the stored response


@sales.command(part_of="Transaction")
class MarkTransactionFailed:
    transaction_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@sales.command(part_of="Transaction")
class RetryTransaction:
    transaction_id = Identifier(required=True)


@sales.command(part_of="Transaction")
class CancelTransaction:
    transaction_id = Identifier(required=True)


@sales.command_handler(part_of=Transaction)
class TransactionLifecycleHandler:
    @handle(MarkTransactionCompleted)
    def mark_completed(self, command):
        repo = current_domain.repository_for(Transaction)
        transaction = repo.get(command.transaction_id)
        response_data = json.loads(command.response_data) if command.response_data else None
        transaction.mark_completed(response_data)
        repo.add(transaction)

    @handle(MarkTransactionFailed)
    def mark_failed(self, command):
        repo = current_domain.repository_for(Transaction)
        transaction = repo.get(command.transaction_id)
        transaction.mark_failed(command.reason)
        repo.add(transaction)

    @handle(RetryTransaction)
    def retry(self, command):
        repo = current_domain.repository_for(Transaction)
        transaction = repo.get(command.transaction_id)
        transaction.retry()
        repo.add(transaction)

    @handle(CancelTransaction)
    def cancel(self, command):
        repo = current_domain.repository_for(Transaction)
        transaction = repo.get(command.transaction_id)
        transaction.cancel()
        repo.add(transaction)
