"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway for production

The default is chosen from ``CHECKOUT_PAYMENT_GATEWAY`` (``fake`` or
``stripe``); the Stripe adapter reads its key from ``STRIPE_SECRET_KEY``.
"""

import os

from payments.gateway.fake_adapter import FakeGateway
from payments.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_default_gateway() -> PaymentGateway:
    if os.environ.get("CHECKOUT_PAYMENT_GATEWAY", "fake") == "stripe":
        from payments.gateway.stripe_adapter import StripeGateway

        api_key = os.environ.get("STRIPE_SECRET_KEY")
        if not api_key:
            raise RuntimeError("STRIPE_SECRET_KEY must be set when CHECKOUT_PAYMENT_GATEWAY=stripe")
        return StripeGateway(api_key=api_key)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to FakeGateway."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None
