"""Stripe payment gateway adapter.

Authorizations are Stripe PaymentIntents created with automatic payment
methods. The intent's ``client_secret`` is handed to the browser, which
confirms the payment with Stripe Elements.
"""

import stripe
import structlog

from payments.gateway.port import AuthorizationResult, PaymentGateway

logger = structlog.get_logger(__name__)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def authorize(
        self,
        amount_cents: int,
        currency: str,
        metadata: dict,
        idempotency_key: str,
    ) -> AuthorizationResult:
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount_cents,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods={"enabled": True},
                api_key=self.api_key,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as exc:
            logger.warning(
                "Stripe PaymentIntent creation failed",
                error=str(exc),
                http_status=exc.http_status,
                idempotency_key=idempotency_key,
            )
            return AuthorizationResult(
                success=False,
                gateway_status="error",
                failure_reason=exc.user_message or str(exc),
            )

        return AuthorizationResult(
            success=True,
            authorization_id=intent.id,
            client_secret=intent.client_secret,
            gateway_status=intent.status,
            metadata=dict(metadata),
        )
