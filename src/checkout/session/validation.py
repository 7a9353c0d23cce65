"""Boundary validation of checkout session requests.

``parse_checkout_request`` never raises for bad input: it returns either a
validated ``CheckoutSessionRequest`` or a ``CheckoutError`` of kind
``INVALID_BODY``.
"""

import json

from pydantic import ValidationError

from checkout.session.outcome import CheckoutError
from checkout.session.schemas import CheckoutSessionRequest


def flatten_errors(exc: ValidationError) -> dict:
    """Group validation messages by dotted field path.

    Errors that do not belong to a field (e.g. a non-object body) are listed
    under ``formErrors``.
    """
    form_errors: list[str] = []
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        if location:
            field_errors.setdefault(location, []).append(error["msg"])
        else:
            form_errors.append(error["msg"])
    return {"formErrors": form_errors, "fieldErrors": field_errors}


def parse_checkout_request(raw_body) -> CheckoutSessionRequest | CheckoutError:
    """Validate a raw request body (bytes, str or already-decoded JSON)."""
    payload = raw_body
    if isinstance(raw_body, (bytes, bytearray, str)):
        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return CheckoutError.malformed_body()

    try:
        return CheckoutSessionRequest.model_validate(payload)
    except ValidationError as exc:
        return CheckoutError.invalid_body(flatten_errors(exc))
