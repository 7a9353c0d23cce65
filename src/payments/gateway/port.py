"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
Checkout only ever asks the gateway for an authorization (a hold on the
customer's payment method); capture happens later, once the customer has
confirmed the payment on the client side with the returned client secret.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthorizationResult:
    """Result of a payment authorization request."""

    success: bool
    authorization_id: str | None = None
    client_secret: str | None = None
    gateway_status: str | None = None
    failure_reason: str | None = None
    metadata: dict = field(default_factory=dict)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def authorize(
        self,
        amount_cents: int,
        currency: str,
        metadata: dict,
        idempotency_key: str,
    ) -> AuthorizationResult:
        """Request an authorization for ``amount_cents`` in the minor currency unit."""
        ...
