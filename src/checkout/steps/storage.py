"""Session-scoped storage of checkout step state.

Values are JSON strings in a string-keyed mapping (a browser session store,
a server-side session dict, ...). Everything is validated against the
checkout schemas both when written and when read back; an entry that does
not validate or cannot be decoded is removed and treated as absent.
"""

import json
from collections.abc import MutableMapping
from dataclasses import replace

import structlog
from pydantic import ValidationError

from checkout.session.schemas import (
    CarrierSelectionInput,
    GuestCheckoutInput,
    OrderConfirmationInput,
    ShippingAddressInput,
)
from checkout.steps.sequencer import CheckoutContext, CheckoutStep, carrier_selection, guard

logger = structlog.get_logger(__name__)

GUEST_CHECKOUT = "guestCheckout"
SHIPPING_ADDRESS = "shippingAddress"
SELECTED_CARRIER = "selectedCarrier"
ORDER_CONFIRMATION = "orderConfirmation"

# Cleared once the order is created
ATTEMPT_KEYS = (GUEST_CHECKOUT, SHIPPING_ADDRESS, SELECTED_CARRIER)


class SessionStore:
    def __init__(self, storage: MutableMapping[str, str] | None = None) -> None:
        self.storage = storage if storage is not None else {}

    def read(self, key: str, schema):
        raw = self.storage.get(key)
        if raw is None:
            return None

        try:
            return schema.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Discarding invalid session entry", key=key, errors=exc.error_count())
            self.remove(key)
            return None

    def write(self, key: str, value, schema) -> bool:
        """Validate and store ``value``. Returns False (and stores nothing) when invalid."""
        try:
            model = value if isinstance(value, schema) else schema.model_validate(value)
        except ValidationError as exc:
            logger.error("Refusing to store invalid session entry", key=key, errors=exc.error_count())
            return False

        self.storage[key] = json.dumps(model.model_dump(mode="json", by_alias=True, exclude_none=True))
        return True

    def remove(self, key: str) -> None:
        self.storage.pop(key, None)

    def clear_attempt(self) -> None:
        for key in ATTEMPT_KEYS:
            self.remove(key)


def load_context(store: SessionStore, cart_item_count: int, authenticated: bool = False) -> CheckoutContext:
    """Rebuild the checkout context from what the session holds."""
    carrier = store.read(SELECTED_CARRIER, CarrierSelectionInput)
    confirmation = store.read(ORDER_CONFIRMATION, OrderConfirmationInput)

    context = CheckoutContext(
        cart_item_count=cart_item_count,
        authenticated=authenticated,
        guest=store.read(GUEST_CHECKOUT, GuestCheckoutInput),
        shipping_address=store.read(SHIPPING_ADDRESS, ShippingAddressInput),
        carrier=carrier.model_copy(update={"relay_point": None}) if carrier else None,
        relay_point=carrier.relay_point if carrier else None,
        confirmation=confirmation,
    )
    return _with_current_step(context)


def save_context(store: SessionStore, context: CheckoutContext) -> None:
    """Persist the context; absent values are removed from the session."""
    if context.confirmation is not None:
        store.clear_attempt()
        store.write(ORDER_CONFIRMATION, context.confirmation, OrderConfirmationInput)
        return

    store.remove(ORDER_CONFIRMATION)
    _save(store, GUEST_CHECKOUT, context.guest, GuestCheckoutInput)
    _save(store, SHIPPING_ADDRESS, context.shipping_address, ShippingAddressInput)
    _save(store, SELECTED_CARRIER, carrier_selection(context), CarrierSelectionInput)


def _save(store: SessionStore, key: str, value, schema) -> None:
    if value is None:
        store.remove(key)
    else:
        store.write(key, value, schema)


def _with_current_step(context: CheckoutContext) -> CheckoutContext:
    if context.confirmation is not None:
        step = CheckoutStep.CONFIRMATION
    elif context.carrier is not None:
        step = CheckoutStep.RELAY_POINT if context.needs_relay_point and context.relay_point is None else CheckoutStep.PAYMENT
    elif context.shipping_address is not None:
        step = CheckoutStep.CARRIER
    elif context.is_identified:
        step = CheckoutStep.SHIPPING
    else:
        step = CheckoutStep.AUTH

    # Walk back to the first step the guards accept.
    decision = guard(step, context)
    while not decision.allowed:
        step = decision.redirect_to
        decision = guard(step, context)

    return replace(context, step=step)
