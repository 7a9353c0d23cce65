"""Checkout session outcomes.

A checkout attempt either is rejected before anything happens, fails at the
payment processor, or gets past the authorization. Once authorized, the
attempt is in one of three phases:

    AUTHORIZED                  the processor holds the funds, no order yet
    AUTHORIZED_BUT_UNPERSISTED  the order could not be recorded; the hold is
                                orphaned until reconciled
    PERSISTED                   the pending order exists

The phase travels with the outcome so callers (and the reconciliation job)
can tell a clean failure from an orphaned authorization.
"""

from dataclasses import dataclass, replace
from enum import Enum


class CheckoutErrorKind(Enum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_BODY = "invalid_body"
    EMPTY_CART = "empty_cart"
    PAYMENT_AUTHORIZATION_FAILED = "payment_authorization_failed"
    ORDER_PERSISTENCE_FAILED = "order_persistence_failed"


_STATUS_CODES = {
    CheckoutErrorKind.UNAUTHENTICATED: 401,
    CheckoutErrorKind.INVALID_BODY: 400,
    CheckoutErrorKind.EMPTY_CART: 400,
    CheckoutErrorKind.PAYMENT_AUTHORIZATION_FAILED: 500,
    CheckoutErrorKind.ORDER_PERSISTENCE_FAILED: 500,
}

# Errors after which the shopper may simply try again. An order persistence
# failure leaves an authorization behind, so it needs support instead.
_RETRYABLE = {
    CheckoutErrorKind.UNAUTHENTICATED,
    CheckoutErrorKind.INVALID_BODY,
    CheckoutErrorKind.EMPTY_CART,
    CheckoutErrorKind.PAYMENT_AUTHORIZATION_FAILED,
}


@dataclass(frozen=True)
class CheckoutError:
    kind: CheckoutErrorKind
    message: str
    details: dict | None = None

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self.kind]

    @property
    def retryable(self) -> bool:
        return self.kind in _RETRYABLE

    def to_payload(self) -> dict:
        payload = {"error": self.message, "code": self.kind.value, "retryable": self.retryable}
        if self.details is not None:
            payload["details"] = self.details
        return payload

    @classmethod
    def unauthenticated(cls):
        return cls(CheckoutErrorKind.UNAUTHENTICATED, "Not authenticated")

    @classmethod
    def malformed_body(cls):
        return cls(CheckoutErrorKind.INVALID_BODY, "Invalid request body")

    @classmethod
    def invalid_body(cls, details: dict):
        return cls(CheckoutErrorKind.INVALID_BODY, "Invalid checkout data", details=details)

    @classmethod
    def empty_cart(cls):
        return cls(CheckoutErrorKind.EMPTY_CART, "Cart is empty")

    @classmethod
    def payment_authorization_failed(cls, reason: str):
        return cls(CheckoutErrorKind.PAYMENT_AUTHORIZATION_FAILED, f"Payment processor error: {reason}")

    @classmethod
    def order_persistence_failed(cls, reason: str, order_number: str):
        return cls(
            CheckoutErrorKind.ORDER_PERSISTENCE_FAILED,
            f"Order could not be recorded: {reason}. "
            f"Your payment was not captured; please contact support with reference {order_number}.",
        )


class CheckoutPhase(Enum):
    AUTHORIZED = "authorized"
    AUTHORIZED_BUT_UNPERSISTED = "authorized_but_unpersisted"
    PERSISTED = "persisted"


@dataclass(frozen=True)
class CheckoutOutcome:
    phase: CheckoutPhase | None = None
    error: CheckoutError | None = None
    order_number: str | None = None
    order_id: str | None = None
    authorization_id: str | None = None
    client_secret: str | None = None
    total_amount: int | None = None
    cart_source: str | None = None  # "store" or "client"
    cart_cleared: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and self.phase == CheckoutPhase.PERSISTED

    @classmethod
    def rejected(cls, error: CheckoutError, **kwargs):
        return cls(error=error, **kwargs)

    def advance(self, phase: CheckoutPhase, **changes):
        return replace(self, phase=phase, **changes)
