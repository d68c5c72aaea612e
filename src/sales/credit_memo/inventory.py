"""Credit memo restock: command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from sales.credit_memo.credit_memo import CreditMemo
from sales.domain import sales

logger = structlog.get_logger(__name__)


@sales.command(part_of="CreditMemo")
class RestoreCreditMemoInventory:
    credit_memo_id = Identifier(required=True)


@sales.command_handler(part_of=CreditMemo)
class CreditMemoInventoryHandler:
    @handle(RestoreCreditMemoInventory)
    def restore_inventory(self, command):
        repo = current_domain.repository_for(CreditMemo)
        memo = repo.get(command.credit_memo_id)
        restored = memo.restore_inventory()
        if not restored:
            logger.info("No credit memo items left to restock", credit_memo_id=str(memo.id))
            return 0

        repo.add(memo)
        logger.info("Credit memo items restocked", credit_memo_id=str(memo.id), lines=restored)
        return restored
