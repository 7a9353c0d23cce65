"""Shared BDD fixtures and step definitions for the Checkout domain."""

import pytest
from checkout.cart.cart import Cart, CartItem
from checkout.cart.events import (
    CartAssignedToUser,
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then

# Map event name strings to classes for dynamic lookup in Then steps
_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartQuantityUpdated": CartQuantityUpdated,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
    "CartsMerged": CartsMerged,
    "CartAssignedToUser": CartAssignedToUser,
}


def _item(product_id, quantity=1, price=2500, variant_id=None):
    return CartItem.create(
        product_id=product_id,
        name=f"Product {product_id}",
        unit_price_cents=price,
        creator_slug="atelier-lune",
        variant_id=variant_id,
        quantity=quantity,
    )


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps — Cart
# ---------------------------------------------------------------------------
@given("a user cart", target_fixture="cart")
def user_cart():
    cart = Cart.create(user_id="user-1")
    cart._events.clear()
    return cart


@given("a guest cart", target_fixture="guest_cart")
def guest_cart():
    cart = Cart.create(session_id="sess-guest-1")
    cart._events.clear()
    return cart


@given(parsers.cfparse('the cart holds {qty:d} of "{product_id}" at {price:d} cents'), target_fixture="cart")
def cart_holds(cart, qty, product_id, price):
    cart.add_item(_item(product_id, quantity=qty, price=price))
    cart._events.clear()
    return cart


@given(parsers.cfparse('the guest cart holds {qty:d} of "{product_id}" at {price:d} cents'), target_fixture="guest_cart")
def guest_cart_holds(guest_cart, qty, product_id, price):
    guest_cart.add_item(_item(product_id, quantity=qty, price=price))
    guest_cart._events.clear()
    return guest_cart


# ---------------------------------------------------------------------------
# Then steps — Cart
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_one_line(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_lines(cart, count):
    assert len(cart.items) == count


@then(parsers.cfparse('the cart holds {qty:d} of "{product_id}"'))
def cart_holds_quantity(cart, qty, product_id):
    assert cart.find_item(product_id).quantity == qty


@then(parsers.cfparse("the cart total is {total:d} cents"))
def cart_total_is(cart, total):
    assert cart.total == total


@then("the cart is empty")
def cart_is_empty(cart):
    assert cart.is_empty
    assert cart.total == 0


@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"
