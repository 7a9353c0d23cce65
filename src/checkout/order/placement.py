"""Pending order placement — command and handler."""

import json

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.order import Order


@checkout.command(part_of="Order")
class PlacePendingOrder:
    order_number = String(required=True, max_length=50)
    creator_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(required=True, max_length=255)
    total_amount = Integer(required=True, min_value=0)
    shipping_address = Text(required=True)  # JSON: address dict
    shipping_mode = String(required=True, max_length=20)
    relay_point_id = String(max_length=100)
    relay_point_name = String(max_length=255)
    shipping_cost = Integer(required=True, min_value=0)
    carrier = String(required=True, max_length=100)
    payment_intent_id = String(required=True, max_length=255)


@checkout.command_handler(part_of=Order)
class PlacePendingOrderHandler:
    @handle(PlacePendingOrder)
    def place_pending_order(self, command):
        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )

        order = Order.place_pending(
            order_number=command.order_number,
            creator_id=command.creator_id,
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            total_amount=command.total_amount,
            shipping_address=shipping_address,
            shipping_mode=command.shipping_mode,
            relay_point_id=command.relay_point_id,
            relay_point_name=command.relay_point_name,
            shipping_cost=command.shipping_cost,
            carrier=command.carrier,
            payment_intent_id=command.payment_intent_id,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
