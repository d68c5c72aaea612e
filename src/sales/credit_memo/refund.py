"""Refund processing: command and handler.

The credit memo and the order are updated in the same unit of work. The
order re-checks the refundable ceiling, so of two refunds racing for the
same balance only the first one commits. The loser's memo is marked
``failed`` and can be adjusted and processed again.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from sales.credit_memo.credit_memo import CreditMemo
from sales.domain import sales
from sales.order.order import Order

logger = structlog.get_logger(__name__)


@sales.command(part_of="CreditMemo")
class ProcessCreditMemoRefund:
    credit_memo_id = Identifier(required=True)


def apply_refund(memo, order):
    """Book ``memo`` against ``order``; the caller saves both."""
    memo.assert_refundable()
    order.record_refund(memo.grand_total, str(memo.id))
    memo.mark_refunded()

    logger.info(
        "Credit memo refunded",
        credit_memo_id=str(memo.id),
        order_id=str(order.id),
        amount=memo.grand_total,
        total_refunded=order.total_refunded,
    )


def attempt_refund(memo, order):
    """Book the refund, or mark ``memo`` failed when the order's balance no
    longer covers it. Returns True when the money went back."""
    try:
        apply_refund(memo, order)
    except ValidationError as exc:
        if "refund" not in exc.messages:
            raise
        memo.mark_refund_failed(exc.messages["refund"][0])
        logger.warning(
            "Credit memo refund failed",
            credit_memo_id=str(memo.id),
            order_id=str(order.id),
            amount=memo.grand_total,
            max_refundable=order.max_refundable,
        )
        return False
    return True


@sales.command_handler(part_of=CreditMemo)
class CreditMemoRefundHandler:
    @handle(ProcessCreditMemoRefund)
    def process_refund(self, command):
        """Returns the memo's refund status, ``processed`` or ``failed``."""
        memo_repo = current_domain.repository_for(CreditMemo)
        order_repo = current_domain.repository_for(Order)

        memo = memo_repo.get(command.credit_memo_id)
        order = order_repo.get(str(memo.order_id))
        if attempt_refund(memo, order):
            order_repo.add(order)
        memo_repo.add(memo)
        return memo.refund_status
