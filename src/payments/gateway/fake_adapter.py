"""Configurable fake payment gateway for development and testing.

This adapter simulates a real payment gateway without any external calls.
It can be configured at runtime to succeed or fail, making it useful for:
- Manual checkout testing without processor credentials
- Automated tests with predictable outcomes
"""

from uuid import uuid4

from payments.gateway.port import AuthorizationResult, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def authorize(
        self,
        amount_cents: int,
        currency: str,
        metadata: dict,
        idempotency_key: str,
    ) -> AuthorizationResult:
        call = {
            "method": "authorize",
            "amount_cents": amount_cents,
            "currency": currency,
            "metadata": dict(metadata),
            "idempotency_key": idempotency_key,
        }
        self.calls.append(call)

        if self.should_succeed:
            authorization_id = f"pi_fake_{uuid4().hex[:16]}"
            return AuthorizationResult(
                success=True,
                authorization_id=authorization_id,
                client_secret=f"{authorization_id}_secret_{uuid4().hex[:12]}",
                gateway_status="requires_payment_method",
                metadata=dict(metadata),
            )
        return AuthorizationResult(
            success=False,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )
