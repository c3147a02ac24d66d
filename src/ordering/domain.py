"""Ordering bounded context: carts, orders, customers and checkout.

Carts and orders are plain (non event-sourced) aggregates. Checkout and
payment webhooks are async application services that talk to the aggregates
through repository ports, so the storage medium stays interchangeable.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging(log_dir="logs", log_file_prefix="bakery")

logger = get_logger(__name__)

ordering = Domain(name="ordering")
