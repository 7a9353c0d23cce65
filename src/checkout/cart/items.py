"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from checkout.cart.cart import Cart, CartItem
from checkout.domain import checkout


@checkout.command(part_of="Cart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    creator_slug = String(required=True, max_length=255)
    quantity = Integer(default=1, min_value=1)
    image = String(max_length=1024)
    variant_type = String(max_length=50)
    variant_value = String(max_length=100)


@checkout.command(part_of="Cart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    quantity = Integer(required=True, min_value=0)


@checkout.command(part_of="Cart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()


@checkout.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)

        variant_info = None
        if command.variant_type and command.variant_value:
            variant_info = {"type": command.variant_type, "value": command.variant_value}

        cart.add_item(
            CartItem.create(
                product_id=command.product_id,
                variant_id=command.variant_id,
                name=command.name,
                unit_price_cents=command.unit_price_cents,
                creator_slug=command.creator_slug,
                quantity=command.quantity or 1,
                image=command.image,
                variant_info=variant_info,
            )
        )
        repo.add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.update_quantity(
            product_id=command.product_id,
            quantity=command.quantity,
            variant_id=command.variant_id,
        )
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.remove_item(product_id=command.product_id, variant_id=command.variant_id)
        repo.add(cart)
