"""Order aggregate (CQRS) — the pending order recorded at checkout.

An order is created exactly once per checkout attempt, right after the
payment processor has authorized the charge, and starts in the ``Pending``
state. Transitions beyond ``Pending`` (payment confirmation, shipping,
returns) belong to the order lifecycle and are not handled here.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, ValueObject

from checkout.domain import checkout
from checkout.order.events import PendingOrderPlaced


class OrderStatus(Enum):
    PENDING = "PENDING"


class ShippingMode(Enum):
    HOME_DELIVERY = "HOME_DELIVERY"
    RELAY_POINT = "RELAY_POINT"


UNKNOWN_CREATOR = "unknown"


@checkout.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout; never changes afterwards."""

    street = String(required=True, max_length=255)
    complement = String(max_length=255)
    city = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@checkout.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    creator_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(required=True, max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    total_amount = Integer(required=True, min_value=0)  # cents, items + shipping
    shipping_address = ValueObject(ShippingAddress)
    shipping_mode = String(required=True, choices=ShippingMode)
    relay_point_id = String(max_length=100)
    relay_point_name = String(max_length=255)
    shipping_cost = Integer(required=True, min_value=0)
    carrier = String(required=True, max_length=100)
    payment_intent_id = String(required=True, max_length=255)
    created_at = DateTime()

    @classmethod
    def place_pending(
        cls,
        order_number,
        creator_id,
        customer_id,
        customer_email,
        total_amount,
        shipping_address,
        shipping_mode,
        shipping_cost,
        carrier,
        payment_intent_id,
        customer_name=None,
        relay_point_id=None,
        relay_point_name=None,
    ):
        """Record a pending order for an authorized payment."""
        if shipping_cost > total_amount:
            raise ValidationError({"total_amount": ["Total amount must include the shipping cost"]})

        if isinstance(shipping_address, dict):
            shipping_address = ShippingAddress(**shipping_address)

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            creator_id=creator_id or UNKNOWN_CREATOR,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
            shipping_address=shipping_address,
            shipping_mode=ShippingMode(shipping_mode).value,
            relay_point_id=relay_point_id,
            relay_point_name=relay_point_name,
            shipping_cost=shipping_cost,
            carrier=carrier,
            payment_intent_id=payment_intent_id,
            created_at=now,
        )

        order.raise_(
            PendingOrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                creator_id=order.creator_id,
                customer_id=str(customer_id),
                total_amount=total_amount,
                shipping_cost=shipping_cost,
                shipping_mode=order.shipping_mode,
                carrier=carrier,
                payment_intent_id=payment_intent_id,
                placed_at=now,
            )
        )
        return order
