"""TaniMart domain: catalog, cart, checkout, order ledger and notification outbox.

All aggregates live in one domain so that a checkout (stock decrement, order,
order items and customer notification) commits as a single unit of work.
"""

import logging

from protean.domain import Domain

from tanimart.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Suppress noisy library loggers
logging.getLogger("protean").setLevel(logging.WARNING)

tanimart = Domain(name="tanimart")
