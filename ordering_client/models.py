"""
Domain Models

Catalog entries as fetched from the upstream API, plus the records the
client owns: cart lines and completed orders.

Catalog models keep the upstream snake_case keys as aliases so a response
body validates directly. Cart and order records keep the camelCase keys of
the persisted store (itemId, cuisineId, imageUrl, totalAmount, ...) so a
saved cart or history round-trips field-for-field.
"""

import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def round_half_up(amount: float) -> int:
    """Round to whole units, halves away from zero (98.5 -> 99)."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# =============================================================================
# CATALOG
# =============================================================================

class MenuItem(BaseModel):
    """A single dish as listed by the catalog. Price and rating are text."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    image_url: str = ""
    price: str
    rating: str = "0"

    @property
    def rating_value(self) -> float:
        """Rating as a number; unparsable or non-finite ratings count as 0."""
        try:
            value = float(self.rating)
        except (TypeError, ValueError):
            return 0.0
        return value if math.isfinite(value) else 0.0


class Cuisine(BaseModel):
    """A cuisine and its dishes. Identity is the cuisine id."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="cuisine_id")
    name: str = Field(alias="cuisine_name")
    image_url: str = Field(default="", alias="cuisine_image_url")
    items: tuple[MenuItem, ...] = ()


# =============================================================================
# CART
# =============================================================================

class CartLine(BaseModel):
    """
    One distinct product in the cart.

    unit_price is the parsed catalog price and is never rounded; the
    *_as_int properties exist for display and for the payment payload.
    """

    model_config = ConfigDict(populate_by_name=True)

    cuisine_id: str = Field(alias="cuisineId")
    item_id: str = Field(alias="itemId")
    name: str
    unit_price: float = Field(alias="price")
    quantity: int = Field(default=1, ge=1)
    image_url: str = Field(default="", alias="imageUrl")

    @property
    def total_price(self) -> float:
        return self.unit_price * self.quantity

    @property
    def price_as_int(self) -> int:
        return round_half_up(self.unit_price)

    @property
    def total_price_as_int(self) -> int:
        return round_half_up(self.total_price)

    def to_record(self) -> dict:
        """Serialize with the persisted field names."""
        return self.model_dump(by_alias=True)


# =============================================================================
# ORDERS
# =============================================================================

class OrderItem(BaseModel):
    """Immutable snapshot of a cart line taken when an order is placed."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    price: str
    quantity: int
    image_url: str = Field(default="", alias="imageUrl")


class Order(BaseModel):
    """A completed order. Price text is fixed at two decimals."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    placed_at: datetime = Field(alias="date")
    items: tuple[OrderItem, ...] = ()
    total_amount: float = Field(alias="totalAmount")
    transaction_reference: Optional[str] = Field(default=None, alias="txnRefNo")

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def to_record(self) -> dict:
        """Serialize with the persisted field names (JSON-safe)."""
        return self.model_dump(mode="json", by_alias=True)
