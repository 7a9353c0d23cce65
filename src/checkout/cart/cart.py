"""Shopping Cart aggregate (CQRS) — lines selected by a shopper before checkout.

A cart belongs either to an authenticated user (``user_id``) or to an
anonymous browser session (``session_id``). Lines are identified by their
product and optional variant: two lines with the same key are the same line,
so adding an already-present product increments its quantity instead of
appending a duplicate.

Totals are never stored. ``total``, ``item_count`` and ``is_empty`` are
computed from the current lines every time they are read.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from checkout.cart.events import (
    CartAssignedToUser,
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    CartsMerged,
)
from checkout.domain import checkout


def item_key(product_id, variant_id=None) -> str:
    """Identity key of a cart line: ``product`` or ``product:variant``."""
    return f"{product_id}:{variant_id}" if variant_id else str(product_id)


@checkout.value_object(part_of="Cart")
class VariantInfo:
    """Human-readable variant description, e.g. ``{"type": "Size", "value": "M"}``."""

    type = String(required=True, max_length=50)
    value = String(required=True, max_length=100)


@checkout.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    name = String(required=True, max_length=255)
    unit_price_cents = Integer(required=True, min_value=0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1024)
    variant_info = ValueObject(VariantInfo)
    creator_slug = String(required=True, max_length=255)

    @classmethod
    def create(
        cls,
        product_id,
        name,
        unit_price_cents,
        creator_slug,
        variant_id=None,
        quantity=1,
        image=None,
        variant_info=None,
    ):
        """Build a new cart line, rejecting blank identifiers and negative prices."""
        errors = {}
        if not str(product_id or "").strip():
            errors["product_id"] = ["Product ID is required"]
        if not str(name or "").strip():
            errors["name"] = ["Product name is required"]
        if unit_price_cents is None or unit_price_cents < 0:
            errors["unit_price_cents"] = ["Price cannot be negative"]
        if not str(creator_slug or "").strip():
            errors["creator_slug"] = ["Creator slug is required"]
        if errors:
            raise ValidationError(errors)

        if isinstance(variant_info, dict):
            variant_info = VariantInfo(**variant_info)

        return cls(
            product_id=product_id,
            variant_id=variant_id or None,
            name=name,
            unit_price_cents=unit_price_cents,
            quantity=quantity,
            image=image,
            variant_info=variant_info,
            creator_slug=creator_slug,
        )

    @property
    def key(self) -> str:
        return item_key(self.product_id, self.variant_id)

    @property
    def subtotal(self) -> int:
        return self.unit_price_cents * self.quantity

    def duplicate(self):
        """A detached copy of this line, suitable for adding to another cart."""
        return CartItem(
            product_id=self.product_id,
            variant_id=self.variant_id,
            name=self.name,
            unit_price_cents=self.unit_price_cents,
            quantity=self.quantity,
            image=self.image,
            variant_info=self.variant_info,
            creator_slug=self.creator_slug,
        )

    def to_snapshot(self) -> dict:
        snapshot = {
            "product_id": str(self.product_id),
            "variant_id": str(self.variant_id) if self.variant_id else None,
            "name": self.name,
            "price": self.unit_price_cents,
            "quantity": self.quantity,
            "image": self.image,
            "creator_slug": self.creator_slug,
            "variant_info": None,
        }
        if self.variant_info:
            snapshot["variant_info"] = {"type": self.variant_info.type, "value": self.variant_info.value}
        return snapshot


@checkout.aggregate
class Cart:
    user_id = Identifier()  # Absent for guest carts
    session_id = String(max_length=255)  # Guest cart identification
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def item_keys_must_be_unique(self):
        keys = [item.key for item in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A cart cannot hold two lines for the same product and variant"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None, session_id=None):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def is_empty(self) -> bool:
        return len(self.items) == 0

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> int:
        return sum(item.subtotal for item in self.items)

    def find_item(self, product_id, variant_id=None):
        key = item_key(product_id, variant_id)
        return next((i for i in self.items if i.key == key), None)

    def snapshot(self) -> list[dict]:
        return [item.to_snapshot() for item in self.items]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, item):
        """Add a line to the cart, or increment the quantity of the line with the same key."""
        existing = next((i for i in self.items if i.key == item.key), None)

        if existing:
            existing.quantity += item.quantity
            quantity = existing.quantity
        else:
            self.add_items(item)
            quantity = item.quantity

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_key=item.key,
                product_id=str(item.product_id),
                variant_id=str(item.variant_id) if item.variant_id else None,
                quantity_added=item.quantity,
                quantity=quantity,
            )
        )

    def remove_item(self, product_id, variant_id=None):
        """Remove the line matching the product (and variant)."""
        item = self.find_item(product_id, variant_id)
        if item is None:
            raise ValidationError({"item": ["Item not found in cart"]})

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_key=item.key))

    def update_quantity(self, product_id, quantity, variant_id=None):
        """Overwrite a line's quantity. A quantity of zero removes the line."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        if quantity == 0:
            self.remove_item(product_id, variant_id)
            return

        item = self.find_item(product_id, variant_id)
        if item is None:
            raise ValidationError({"item": ["Item not found in cart"]})

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_key=item.key,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def clear(self):
        """Remove every line."""
        removed = list(self.items)
        for item in removed:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed_count=len(removed)))

    # -------------------------------------------------------------------
    # Cart merging (guest → authenticated)
    # -------------------------------------------------------------------
    def merge(self, other):
        """Fold every line of ``other`` into this cart with the add-or-increment rule."""
        for item in list(other.items):
            self.add_item(item.duplicate())

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_cart_id=str(other.id),
                items_merged_count=len(other.items),
            )
        )

    def assign_to_user(self, user_id):
        """Bind a guest cart to an authenticated user. Lines are untouched."""
        self.user_id = user_id
        self.updated_at = datetime.now(UTC)

        self.raise_(CartAssignedToUser(cart_id=str(self.id), user_id=str(user_id)))
