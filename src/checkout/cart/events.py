"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, String

from checkout.domain import checkout


@checkout.event(part_of="Cart")
class CartItemAdded:
    """A product line was added to the cart, or its quantity was incremented."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_key = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity_added = Integer(required=True)
    quantity = Integer(required=True)


@checkout.event(part_of="Cart")
class CartQuantityUpdated:
    """The quantity of a cart line was overwritten."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_key = String(required=True, max_length=255)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@checkout.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_key = String(required=True, max_length=255)


@checkout.event(part_of="Cart")
class CartCleared:
    """Every line was removed from the cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    items_removed_count = Integer(required=True)


@checkout.event(part_of="Cart")
class CartsMerged:
    """Another cart's lines were folded into this cart."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    source_cart_id = Identifier()
    items_merged_count = Integer(required=True)


@checkout.event(part_of="Cart")
class CartAssignedToUser:
    """A guest cart was bound to an authenticated user."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
