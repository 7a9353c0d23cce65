"""Pydantic schemas for the checkout boundary.

These describe what the browser sends (and keeps in session storage) during
checkout. Field names are camelCase on the wire; both camelCase and
snake_case are accepted when validating.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ShippingModeName = Literal["RELAY_POINT", "HOME_DELIVERY"]

UNKNOWN_CREATOR_SLUG = "unknown"


class CheckoutModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shipping and carrier
# ---------------------------------------------------------------------------
class ShippingAddressInput(CheckoutModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "firstName": "Jean",
                    "lastName": "Dupont",
                    "street": "12 rue de la Paix",
                    "city": "Paris",
                    "postalCode": "75001",
                    "country": "FR",
                }
            ]
        },
    )

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    street: str = Field(min_length=1, max_length=255)
    street_complement: str | None = Field(None, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(pattern=r"^\d{5}$")
    country: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class RelayPointInput(CheckoutModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)


class CarrierSelectionInput(CheckoutModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "carrier": "chronopost",
                    "carrierName": "Chronopost",
                    "price": 599,
                    "estimatedDays": "1-2 jours",
                }
            ]
        },
    )

    carrier: str = Field(min_length=1, max_length=100)
    carrier_name: str = Field(min_length=1, max_length=255)
    price: int = Field(ge=0)  # cents
    estimated_days: str = Field(min_length=1, max_length=255)
    relay_point: RelayPointInput | None = None


# ---------------------------------------------------------------------------
# Cart lines
# ---------------------------------------------------------------------------
class VariantInfoInput(CheckoutModel):
    type: str
    value: str


class CartItemSnapshot(CheckoutModel):
    """A cart line as held by the cart store or submitted by the browser."""

    product_id: str = Field(min_length=1)
    variant_id: str | None = None
    name: str = Field(min_length=1)
    price: int = Field(ge=0)  # cents
    quantity: int = Field(gt=0)
    image: str | None = None
    creator_slug: str = UNKNOWN_CREATOR_SLUG
    variant_info: VariantInfoInput | None = None

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


# ---------------------------------------------------------------------------
# Checkout session
# ---------------------------------------------------------------------------
class CheckoutSessionRequest(CheckoutModel):
    shipping_address: ShippingAddressInput
    carrier: CarrierSelectionInput
    shipping_mode: ShippingModeName
    # Browser-held cart lines, used only when the stored cart is empty
    items: list[CartItemSnapshot] | None = None


class CheckoutSessionResponse(CheckoutModel):
    client_secret: str
    order_id: str


# ---------------------------------------------------------------------------
# Step state kept by the browser between checkout steps
# ---------------------------------------------------------------------------
class GuestCheckoutInput(CheckoutModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    first_name: str | None = Field(None, min_length=1)
    last_name: str | None = Field(None, min_length=1)
    accepts_marketing: bool = False


class OrderConfirmationInput(CheckoutModel):
    order_id: str = Field(min_length=1)
    total: int = Field(ge=0)
    paid_at: datetime
