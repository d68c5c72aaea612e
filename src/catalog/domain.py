"""Catalog bounded context: sellable products, their prices and on-hand stock."""

import structlog
from protean.domain import Domain

catalog = Domain(name="catalog")

logger = structlog.get_logger(__name__)
