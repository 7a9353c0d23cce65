"""Protean-backed implementations of the checkout ports."""

import json

from protean.utils.globals import current_domain

from checkout.cart.cart import Cart
from checkout.order.placement import PlacePendingOrder
from checkout.session.ports import CartStore, OrderStore


class RepositoryCartStore(CartStore):
    def find_by_user(self, user_id: str) -> list[dict]:
        cart = current_domain.repository_for(Cart).find_for_user(user_id)
        return cart.snapshot() if cart else []

    def clear(self, user_id: str) -> None:
        repo = current_domain.repository_for(Cart)
        cart = repo.find_for_user(user_id)
        if cart is None or cart.is_empty:
            return
        cart.clear()
        repo.add(cart)


class CommandOrderStore(OrderStore):
    """Records pending orders through the ``PlacePendingOrder`` command."""

    def create(self, fields: dict) -> str:
        command = PlacePendingOrder(
            **{
                **fields,
                "shipping_address": json.dumps(fields["shipping_address"]),
            }
        )
        return current_domain.process(command, asynchronous=False)
