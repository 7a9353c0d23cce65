"""Checkout step sequencer.

A checkout attempt moves forward through

    AUTH (sign in or continue as guest)
      -> SHIPPING
      -> CARRIER (-> RELAY_POINT for pickup carriers)
      -> PAYMENT
      -> CONFIRMATION

The state collected along the way lives in an explicit ``CheckoutContext``.
Guards are pure functions over the context: they either allow entering a
step or name the step to send the shopper back to. Transitions return a new
context and raise ``ValidationError`` when the input or the current state
does not permit them.
"""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from pydantic import ValidationError as SchemaValidationError

from checkout.order.order import ShippingMode
from checkout.session.outcome import CheckoutOutcome
from checkout.session.schemas import (
    CarrierSelectionInput,
    GuestCheckoutInput,
    OrderConfirmationInput,
    RelayPointInput,
    ShippingAddressInput,
)

RELAY_POINT_CARRIERS = frozenset(
    {
        "mondial-relay",
        "relais-colis",
        "chronopost-pickup",
        "chronopost-shop2shop",
    }
)


def is_relay_point_carrier(carrier_code: str | None) -> bool:
    return carrier_code in RELAY_POINT_CARRIERS


class CheckoutStep(Enum):
    CART = "cart"
    AUTH = "auth"
    SHIPPING = "shipping"
    CARRIER = "carrier"
    RELAY_POINT = "relay_point"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"


@dataclass(frozen=True)
class CheckoutContext:
    cart_item_count: int = 0
    authenticated: bool = False
    guest: GuestCheckoutInput | None = None
    shipping_address: ShippingAddressInput | None = None
    carrier: CarrierSelectionInput | None = None
    relay_point: RelayPointInput | None = None
    confirmation: OrderConfirmationInput | None = None
    step: CheckoutStep = CheckoutStep.AUTH

    @property
    def has_items(self) -> bool:
        return self.cart_item_count > 0

    @property
    def is_identified(self) -> bool:
        return self.authenticated or self.guest is not None

    @property
    def needs_relay_point(self) -> bool:
        return self.carrier is not None and is_relay_point_carrier(self.carrier.carrier)

    @property
    def order_id(self) -> str | None:
        return self.confirmation.order_id if self.confirmation else None

    def with_cart(self, item_count: int) -> "CheckoutContext":
        return replace(self, cart_item_count=item_count)


@dataclass(frozen=True)
class StepDecision:
    allowed: bool
    redirect_to: CheckoutStep | None = None

    @classmethod
    def allow(cls):
        return cls(allowed=True)

    @classmethod
    def redirect(cls, step: CheckoutStep):
        return cls(allowed=False, redirect_to=step)


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------
def can_enter_shipping(context: CheckoutContext) -> StepDecision:
    if not context.has_items:
        return StepDecision.redirect(CheckoutStep.CART)
    return StepDecision.allow()


def can_enter_carrier(context: CheckoutContext) -> StepDecision:
    if not context.has_items:
        return StepDecision.redirect(CheckoutStep.CART)
    if context.shipping_address is None:
        return StepDecision.redirect(CheckoutStep.SHIPPING)
    return StepDecision.allow()


def can_enter_relay_point(context: CheckoutContext) -> StepDecision:
    decision = can_enter_carrier(context)
    if not decision.allowed:
        return decision
    if not context.needs_relay_point:
        return StepDecision.redirect(CheckoutStep.CARRIER)
    return StepDecision.allow()


def can_enter_payment(context: CheckoutContext) -> StepDecision:
    if not context.has_items:
        return StepDecision.redirect(CheckoutStep.CART)
    if context.shipping_address is None:
        return StepDecision.redirect(CheckoutStep.SHIPPING)
    if context.carrier is None:
        return StepDecision.redirect(CheckoutStep.CARRIER)
    if context.needs_relay_point and context.relay_point is None:
        return StepDecision.redirect(CheckoutStep.RELAY_POINT)
    return StepDecision.allow()


def can_enter_confirmation(context: CheckoutContext) -> StepDecision:
    # Only a successful order creation leads here; the cart is already cleared.
    if context.confirmation is None:
        return StepDecision.redirect(CheckoutStep.CART)
    return StepDecision.allow()


_GUARDS = {
    CheckoutStep.AUTH: can_enter_shipping,
    CheckoutStep.SHIPPING: can_enter_shipping,
    CheckoutStep.CARRIER: can_enter_carrier,
    CheckoutStep.RELAY_POINT: can_enter_relay_point,
    CheckoutStep.PAYMENT: can_enter_payment,
    CheckoutStep.CONFIRMATION: can_enter_confirmation,
}


def guard(step: CheckoutStep, context: CheckoutContext) -> StepDecision:
    """Decide whether ``step`` may be entered with ``context``."""
    if step == CheckoutStep.CART:
        return StepDecision.allow()
    return _GUARDS[step](context)


def _require(step: CheckoutStep, context: CheckoutContext) -> None:
    decision = guard(step, context)
    if not decision.allowed:
        raise ValidationError({"step": [f"Cannot enter {step.value}, go back to {decision.redirect_to.value}"]})


def _parse(schema, value, field_name: str):
    if isinstance(value, schema):
        return value
    try:
        return schema.model_validate(value)
    except SchemaValidationError as exc:
        raise ValidationError({field_name: [error["msg"] for error in exc.errors()]}) from exc


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------
def record_guest(context: CheckoutContext, guest) -> CheckoutContext:
    """Continue as a guest; the shopper goes on to the shipping step."""
    _require(CheckoutStep.SHIPPING, context)
    return replace(
        context,
        guest=_parse(GuestCheckoutInput, guest, "guest"),
        step=CheckoutStep.SHIPPING,
    )


def sign_in(context: CheckoutContext) -> CheckoutContext:
    _require(CheckoutStep.SHIPPING, context)
    return replace(context, authenticated=True, step=CheckoutStep.SHIPPING)


def submit_shipping_address(context: CheckoutContext, address) -> CheckoutContext:
    _require(CheckoutStep.SHIPPING, context)
    return replace(
        context,
        shipping_address=_parse(ShippingAddressInput, address, "shipping_address"),
        step=CheckoutStep.CARRIER,
    )


def select_carrier(context: CheckoutContext, carrier) -> CheckoutContext:
    """Pick a carrier. Pickup carriers open the relay point sub-step.

    A previously chosen relay point is replaced by the one carried in the
    selection, if any.
    """
    _require(CheckoutStep.CARRIER, context)
    selection = _parse(CarrierSelectionInput, carrier, "carrier")
    relay_point = selection.relay_point if is_relay_point_carrier(selection.carrier) else None
    selection = selection.model_copy(update={"relay_point": None})

    return replace(
        context,
        carrier=selection,
        relay_point=relay_point,
        step=CheckoutStep.RELAY_POINT if is_relay_point_carrier(selection.carrier) else CheckoutStep.CARRIER,
    )


def choose_relay_point(context: CheckoutContext, relay_point) -> CheckoutContext:
    _require(CheckoutStep.RELAY_POINT, context)
    return replace(
        context,
        relay_point=_parse(RelayPointInput, relay_point, "relay_point"),
        step=CheckoutStep.RELAY_POINT,
    )


def continue_to_payment(context: CheckoutContext) -> CheckoutContext:
    if context.carrier is None:
        raise ValidationError({"carrier": ["Select a carrier to continue"]})
    if context.needs_relay_point and context.relay_point is None:
        raise ValidationError({"relay_point": ["Select a relay point to continue"]})
    _require(CheckoutStep.PAYMENT, context)
    return replace(context, step=CheckoutStep.PAYMENT)


def carrier_selection(context: CheckoutContext) -> CarrierSelectionInput | None:
    """The carrier selection as submitted at payment, relay point included."""
    if context.carrier is None:
        return None
    relay_point = context.relay_point if context.needs_relay_point else None
    return context.carrier.model_copy(update={"relay_point": relay_point})


def shipping_mode(context: CheckoutContext) -> ShippingMode:
    return ShippingMode.RELAY_POINT if context.needs_relay_point else ShippingMode.HOME_DELIVERY


def checkout_request(context: CheckoutContext, items: list[dict] | None = None) -> dict:
    """Build the create-session body from the collected state."""
    _require(CheckoutStep.PAYMENT, context)
    body = {
        "shippingAddress": context.shipping_address.model_dump(by_alias=True, exclude_none=True),
        "carrier": carrier_selection(context).model_dump(by_alias=True, exclude_none=True),
        "shippingMode": shipping_mode(context).value,
    }
    if items:
        body["items"] = items
    return body


def confirm(context: CheckoutContext, outcome: CheckoutOutcome, paid_at: datetime | None = None) -> CheckoutContext:
    """Record a successful order creation.

    The step state of the attempt (guest info, address, carrier) is dropped;
    only the confirmation survives.
    """
    if not outcome.ok:
        raise ValidationError({"order": ["Order was not created"]})
    _require(CheckoutStep.PAYMENT, context)

    return CheckoutContext(
        cart_item_count=0,
        authenticated=context.authenticated,
        confirmation=OrderConfirmationInput(
            order_id=outcome.order_id,
            total=outcome.total_amount,
            paid_at=paid_at or datetime.now(UTC),
        ),
        step=CheckoutStep.CONFIRMATION,
    )


def reset(context: CheckoutContext) -> CheckoutContext:
    """Start over, keeping only what is known about the shopper's cart and session."""
    return CheckoutContext(cart_item_count=context.cart_item_count, authenticated=context.authenticated)
