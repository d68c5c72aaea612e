"""Customers bounded context: storefront accounts, profiles and address books."""

import structlog
from protean.domain import Domain

customers = Domain(name="customers")

logger = structlog.get_logger(__name__)
