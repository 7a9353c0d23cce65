"""Cart management — commands and handler.

Handles cart creation, clearing, and attaching a guest session's cart to a
user who has just signed in.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.cart.cart import Cart
from checkout.domain import checkout

logger = structlog.get_logger(__name__)


@checkout.command(part_of="Cart")
class CreateCart:
    """Create a new cart for a registered user or a guest session."""

    user_id = Identifier()  # Optional for guest carts
    session_id = String(max_length=255)


@checkout.command(part_of="Cart")
class ClearCart:
    """Remove every line from a cart."""

    cart_id = Identifier(required=True)


@checkout.command(part_of="Cart")
class AttachGuestCart:
    """Attach a guest session's cart to a user who just authenticated.

    When the user already owns a cart, the guest lines are merged into it and
    the guest cart is emptied. Otherwise the guest cart itself is rebound to
    the user.
    """

    user_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@checkout.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(user_id=command.user_id, session_id=command.session_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        cart.clear()
        repo.add(cart)

    @handle(AttachGuestCart)
    def attach_guest_cart(self, command):
        repo = current_domain.repository_for(Cart)
        guest_cart = repo.find_for_session(command.session_id)
        user_cart = repo.find_for_user(command.user_id)

        if guest_cart is None:
            return str(user_cart.id) if user_cart else None

        if user_cart is not None and str(user_cart.id) == str(guest_cart.id):
            return str(user_cart.id)

        if user_cart is None:
            guest_cart.assign_to_user(command.user_id)
            repo.add(guest_cart)
            logger.info("Guest cart assigned to user", cart_id=str(guest_cart.id), user_id=command.user_id)
            return str(guest_cart.id)

        user_cart.merge(guest_cart)
        guest_cart.clear()
        repo.add(user_cart)
        repo.add(guest_cart)
        logger.info(
            "Guest cart merged into user cart",
            cart_id=str(user_cart.id),
            guest_cart_id=str(guest_cart.id),
            user_id=command.user_id,
        )
        return str(user_cart.id)
