"""Storefront bounded context: orders, payment reconciliation, stock and refunds.

Orders, payment intents, the stock ledger and refunds live in a single domain
so that the completion transition (intent, order and stock together) and the
refund decision (refund and order together) commit in one Unit of Work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

storefront = Domain(name="storefront")

logger = get_logger(__name__)
