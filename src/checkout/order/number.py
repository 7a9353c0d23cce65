"""Order number generation.

Order numbers look like ``ORD-M2X9K1AB-4F7C``: a base-36 millisecond
timestamp followed by four random hex characters. They are generated before
the order exists so they can travel in the payment authorization metadata.
The random suffix is the only collision guard; uniqueness is enforced again
by the ``order_number`` field of the Order aggregate.
"""

import string
import time
from uuid import uuid4

_BASE36_DIGITS = string.digits + string.ascii_uppercase

ORDER_NUMBER_PREFIX = "ORD"


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("Only non-negative integers can be encoded")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def generate_order_number(now_ms: int | None = None) -> str:
    timestamp = to_base36(now_ms if now_ms is not None else time.time_ns() // 1_000_000)
    suffix = uuid4().hex[:4].upper()
    return f"{ORDER_NUMBER_PREFIX}-{timestamp}-{suffix}"


def decode_order_timestamp(order_number: str) -> int:
    """Return the millisecond timestamp embedded in an order number."""
    try:
        prefix, timestamp, _suffix = order_number.split("-")
    except ValueError:
        raise ValueError(f"Malformed order number: {order_number!r}") from None
    if prefix != ORDER_NUMBER_PREFIX:
        raise ValueError(f"Malformed order number: {order_number!r}")
    return int(timestamp, 36)
