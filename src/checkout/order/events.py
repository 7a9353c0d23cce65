"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="Order")
class PendingOrderPlaced:
    """A pending order was recorded for an authorized checkout payment."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    creator_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total_amount = Integer(required=True)  # cents, items + shipping
    shipping_cost = Integer(required=True)
    shipping_mode = String(required=True)
    carrier = String(required=True)
    payment_intent_id = String(required=True)
    placed_at = DateTime(required=True)
