"""Credit memo administration: commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from sales.credit_memo.credit_memo import CreditMemo
from sales.domain import sales
from sales.order.order import Order

logger = structlog.get_logger(__name__)


@sales.command(part_of="CreditMemo")
class CompleteCreditMemo:
    credit_memo_id = Identifier(required=True)


@sales.command(part_of="CreditMemo")
class CancelCreditMemo:
    credit_memo_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@sales.command(part_of="CreditMemo")
class UpdateCreditMemo:
    credit_memo_id = Identifier(required=True)
    notes = Text()
    admin_notes = Text()
    adjustment_positive = Float(min_value=0.0)
    adjustment_negative = Float(min_value=0.0)
    refund_method = String(max_length=20)


@sales.command(part_of="CreditMemo")
class DeleteCreditMemo:
    credit_memo_id = Identifier(required=True)


@sales.command_handler(part_of=CreditMemo)
class ManageCreditMemoHandler:
    @handle(CompleteCreditMemo)
    def complete_credit_memo(self, command):
        repo = current_domain.repository_for(CreditMemo)
        memo = repo.get(command.credit_memo_id)
        memo.complete()
        repo.add(memo)

    @handle(CancelCreditMemo)
    def cancel_credit_memo(self, command):
        repo = current_domain.repository_for(CreditMemo)
        memo = repo.get(command.credit_memo_id)
        memo.cancel(command.reason)
        repo.add(memo)
        logger.info("Credit memo cancelled", credit_memo_id=str(memo.id), reason=command.reason)

    @handle(UpdateCreditMemo)
    def update_credit_memo(self, command):
        repo = current_domain.repository_for(CreditMemo)
        memo = repo.get(command.credit_memo_id)
        order = current_domain.repository_for(Order).get(str(memo.order_id))
        memo.update(
            order.max_refundable,
            notes=command.notes,
            admin_notes=command.admin_notes,
            adjustment_positive=command.adjustment_positive,
            adjustment_negative=command.adjustment_negative,
            refund_method=command.refund_method,
        )
        repo.add(memo)

    @handle(DeleteCreditMemo)
    def delete_credit_memo(self, command):
        repo = current_domain.repository_for(CreditMemo)
        memo = repo.get(command.credit_memo_id)
        if not memo.can_be_deleted:
            raise ValidationError({"status": ["Only pending credit memos that were not refunded can be deleted"]})

        repo._dao.delete(memo)
        logger.info("Credit memo deleted", credit_memo_id=str(memo.id))
