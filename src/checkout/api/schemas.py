"""Pydantic request/response schemas for the cart API.

These are external contracts, separate from the internal Protean commands.
"""

from pydantic import Field

from checkout.session.schemas import CartItemSnapshot, CheckoutModel


class AddCartItemRequest(CheckoutModel):
    model_config = {
        **CheckoutModel.model_config,
        "json_schema_extra": {
            "examples": [
                {
                    "productId": "prod-1",
                    "name": "Carnet A5",
                    "price": 2500,
                    "quantity": 2,
                    "creatorSlug": "atelier-lune",
                }
            ]
        },
    }

    product_id: str = Field(min_length=1)
    variant_id: str | None = None
    name: str = Field(min_length=1)
    price: int = Field(ge=0)
    quantity: int = Field(ge=1, default=1)
    image: str | None = None
    creator_slug: str = Field(min_length=1)
    variant_type: str | None = None
    variant_value: str | None = None


class UpdateCartItemRequest(CheckoutModel):
    quantity: int = Field(ge=0)
    variant_id: str | None = None


class CartResponse(CheckoutModel):
    id: str | None = None
    items: list[CartItemSnapshot] = []
    total: int = 0
    item_count: int = 0
