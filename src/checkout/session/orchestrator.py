"""Checkout session orchestration — from cart to authorized payment and pending order.

One call to ``create_checkout_session`` is one checkout attempt:

    1. Auth gate: an identity with user id and email is required.
    2. Body validation (shipping address, carrier selection, shipping mode).
    3. Cart resolution: the stored cart first, the browser's snapshot when
       the stored cart is empty, otherwise the attempt is rejected.
    4. Total = items total + carrier price, computed once and used for both
       the authorization amount and the recorded order amount.
    5. Creator attribution from the first line's creator slug (best effort).
    6. Order number generation, so it can go into the authorization metadata.
    7. Payment authorization. Failure ends the attempt with nothing recorded.
    8. Pending order persistence. Failure leaves an orphaned authorization,
       reported as AUTHORIZED_BUT_UNPERSISTED and left for reconciliation.
    9. Cart clearing, best effort: failures are logged, never reported.

Retries are new attempts: each one gets a new order number and a new
authorization.
"""

import os

import structlog

from checkout.creators.directory import CreatorDirectory, RepositoryCreatorDirectory
from checkout.order.number import generate_order_number
from checkout.order.order import UNKNOWN_CREATOR
from checkout.session.adapters import CommandOrderStore, RepositoryCartStore
from checkout.session.outcome import CheckoutError, CheckoutOutcome, CheckoutPhase
from checkout.session.ports import CartStore, Identity, OrderStore
from checkout.session.schemas import CartItemSnapshot, CheckoutSessionRequest
from checkout.session.validation import parse_checkout_request
from payments.gateway import get_gateway
from payments.gateway.port import PaymentGateway

logger = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "eur"


def items_total(items: list[CartItemSnapshot]) -> int:
    return sum(item.price * item.quantity for item in items)


class CheckoutOrchestrator:
    def __init__(
        self,
        cart_store: CartStore | None = None,
        order_store: OrderStore | None = None,
        creator_directory: CreatorDirectory | None = None,
        gateway: PaymentGateway | None = None,
        currency: str | None = None,
    ) -> None:
        self.cart_store = cart_store or RepositoryCartStore()
        self.order_store = order_store or CommandOrderStore()
        self.creator_directory = creator_directory or RepositoryCreatorDirectory()
        self._gateway = gateway
        self.currency = currency or os.environ.get("CHECKOUT_CURRENCY", DEFAULT_CURRENCY)

    @property
    def gateway(self) -> PaymentGateway:
        return self._gateway or get_gateway()

    # -------------------------------------------------------------------
    # Checkout attempt
    # -------------------------------------------------------------------
    def create_checkout_session(self, identity: Identity | None, raw_body) -> CheckoutOutcome:
        if identity is None or not identity.user_id or not identity.email:
            return CheckoutOutcome.rejected(CheckoutError.unauthenticated())

        request = parse_checkout_request(raw_body)
        if isinstance(request, CheckoutError):
            return CheckoutOutcome.rejected(request)

        items, cart_source = self._resolve_items(identity.user_id, request)
        if not items:
            return CheckoutOutcome.rejected(CheckoutError.empty_cart())

        shipping_cost = request.carrier.price
        total = items_total(items) + shipping_cost

        creator_id = self._resolve_creator(items[0].creator_slug)
        order_number = generate_order_number()

        log = logger.bind(order_number=order_number, user_id=identity.user_id)

        # Payment authorization
        try:
            authorization = self.gateway.authorize(
                amount_cents=total,
                currency=self.currency,
                metadata={
                    "orderNumber": order_number,
                    "userId": identity.user_id,
                    "shippingMode": request.shipping_mode,
                },
                idempotency_key=order_number,
            )
        except Exception as exc:
            log.exception("Payment authorization request failed", amount=total)
            return CheckoutOutcome.rejected(
                CheckoutError.payment_authorization_failed(str(exc)),
                order_number=order_number,
                total_amount=total,
                cart_source=cart_source,
            )

        if not authorization.success:
            log.warning("Payment authorization declined", amount=total, reason=authorization.failure_reason)
            return CheckoutOutcome.rejected(
                CheckoutError.payment_authorization_failed(authorization.failure_reason or "authorization declined"),
                order_number=order_number,
                total_amount=total,
                cart_source=cart_source,
            )

        outcome = CheckoutOutcome(
            phase=CheckoutPhase.AUTHORIZED,
            order_number=order_number,
            authorization_id=authorization.authorization_id,
            client_secret=authorization.client_secret,
            total_amount=total,
            cart_source=cart_source,
        )

        # Pending order persistence
        try:
            order_id = self.order_store.create(
                self._order_fields(identity, request, order_number, creator_id, total, authorization.authorization_id)
            )
        except Exception as exc:
            log.exception(
                "Pending order persistence failed after payment authorization",
                authorization_id=authorization.authorization_id,
                amount=total,
            )
            return outcome.advance(
                CheckoutPhase.AUTHORIZED_BUT_UNPERSISTED,
                error=CheckoutError.order_persistence_failed(str(exc), order_number),
            )

        log.info(
            "Pending order placed",
            order_id=str(order_id),
            amount=total,
            cart_source=cart_source,
            shipping_mode=request.shipping_mode,
        )

        cart_cleared = self._clear_cart(identity.user_id, log)
        return outcome.advance(CheckoutPhase.PERSISTED, order_id=str(order_id), cart_cleared=cart_cleared)

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    def _resolve_items(self, user_id: str, request: CheckoutSessionRequest) -> tuple[list[CartItemSnapshot], str | None]:
        try:
            stored = [CartItemSnapshot.model_validate(line) for line in self.cart_store.find_by_user(user_id)]
        except Exception:
            logger.exception("Stored cart could not be read", user_id=user_id)
            stored = []

        if stored:
            return stored, "store"

        if request.items:
            logger.info("Stored cart is empty, using browser cart", user_id=user_id, line_count=len(request.items))
            return list(request.items), "client"

        return [], None

    def _resolve_creator(self, creator_slug: str | None) -> str:
        if not creator_slug:
            return UNKNOWN_CREATOR
        return self.creator_directory.find_by_slug(creator_slug) or UNKNOWN_CREATOR

    def _order_fields(self, identity, request, order_number, creator_id, total, authorization_id) -> dict:
        address = request.shipping_address
        relay_point = request.carrier.relay_point
        return {
            "order_number": order_number,
            "creator_id": creator_id,
            "customer_id": identity.user_id,
            "customer_name": address.full_name,
            "customer_email": identity.email,
            "total_amount": total,
            "shipping_address": {
                "street": address.street,
                "complement": address.street_complement,
                "city": address.city,
                "postal_code": address.postal_code,
                "country": address.country,
            },
            "shipping_mode": request.shipping_mode,
            "relay_point_id": relay_point.id if relay_point else None,
            "relay_point_name": relay_point.name if relay_point else None,
            "shipping_cost": request.carrier.price,
            "carrier": request.carrier.carrier,
            "payment_intent_id": authorization_id,
        }

    def _clear_cart(self, user_id: str, log) -> bool:
        try:
            self.cart_store.clear(user_id)
        except Exception:
            log.warning("Cart clear failed after order creation", exc_info=True)
            return False
        return True
