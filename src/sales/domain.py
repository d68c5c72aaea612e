"""Sales bounded context: carts, checkout, orders and back-office documents."""

import structlog
from protean.domain import Domain

sales = Domain(name="sales")

logger = structlog.get_logger(__name__)
