"""Checkout bounded context — Shopping Cart and pending Order creation.

Holds the cart aggregate, the checkout orchestration that turns a cart into
an authorized payment and a pending order, and the step sequencing rules of
the checkout flow.
"""

from protean.domain import Domain

from checkout.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

checkout = Domain(name="checkout")
