"""
Pydantic Schemas for Request/Response Validation

Two families live here:
    - Upstream envelopes: the JSON bodies exchanged with the catalog and
      payment API (item list, item detail, payment request/response)
    - Local API schemas: request/response bodies of the FastAPI routes
      that expose an ordering session to a front end
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field

from ordering_client.core.config import Language
from ordering_client.models import CartLine, Cuisine, MenuItem, Order


# =============================================================================
# UPSTREAM ENVELOPES
# =============================================================================

class CatalogPageResponse(BaseModel):
    """Body returned by get_item_list and get_item_by_filter."""
    response_code: int
    outcome_code: int
    response_message: str = ""
    page: int = 0
    count: int = 0
    total_pages: int = 0
    total_items: int = 0
    cuisines: List[Cuisine] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.response_code == 200 and self.outcome_code == 200


class ItemDetailResponse(BaseModel):
    """Body returned by get_item_by_id."""
    response_code: int
    outcome_code: int
    response_message: str = ""
    item_id: str
    item_name: str
    item_price: str
    item_rating: str = "0"
    item_image_url: str = ""

    @property
    def ok(self) -> bool:
        return self.response_code == 200 and self.outcome_code == 200

    def to_menu_item(self) -> MenuItem:
        return MenuItem(
            id=self.item_id,
            name=self.item_name,
            image_url=self.item_image_url,
            price=self.item_price,
            rating=self.item_rating,
        )


class PaymentLine(BaseModel):
    """One entry of the payment request's data array."""
    cuisine_id: int
    item_id: int
    item_price: int
    item_quantity: int


class PaymentPayload(BaseModel):
    """Exact wire body of a make_payment call."""
    total_amount: str
    total_items: int
    data: List[PaymentLine]


class PaymentResponse(BaseModel):
    """Body returned by make_payment."""
    response_code: int = 0
    outcome_code: int = 0
    response_message: str = "Unknown error"
    txn_ref_no: Optional[str] = None
    error_details: Optional[str] = None

    @property
    def ok(self) -> bool:
        return (
            self.response_code == 200
            and self.outcome_code == 200
            and self.txn_ref_no is not None
        )


# =============================================================================
# LOCAL API: REQUESTS
# =============================================================================

class AddToCartRequest(BaseModel):
    """Add one unit of a dish to the cart."""
    cuisine_id: str = Field(..., min_length=1, examples=["1"])
    item: MenuItem


class UpdateQuantityRequest(BaseModel):
    """Set the quantity of a cart line. Zero or less removes it."""
    quantity: int = Field(..., examples=[2])


class LanguageRequest(BaseModel):
    """Switch the catalog language."""
    language: Language = Field(..., examples=["hi"])


# =============================================================================
# LOCAL API: RESPONSES
# =============================================================================

class CartResponse(BaseModel):
    """Cart contents with derived totals."""
    items: List[CartLine]
    item_count: int
    subtotal: float
    tax_a: float
    tax_b: float
    grand_total: float
    subtotal_display: int
    tax_a_display: int
    tax_b_display: int
    grand_total_display: int


class CuisineListResponse(BaseModel):
    """Cuisines merged so far and pagination state."""
    cuisines: List[Cuisine]
    next_page: int
    has_more_pages: bool
    language: Language
    error: Optional[str] = None


class TopDishesResponse(BaseModel):
    """Highest rated dishes from the sampled catalog."""
    dishes: List[MenuItem]


class CheckoutResponse(BaseModel):
    """Response after a successful payment."""
    success: bool
    message: str
    transaction_reference: str
    order: Order


class OrderListResponse(BaseModel):
    """Recent orders, newest first."""
    total: int
    orders: List[Order]


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    transport: str
    storage: str
    timestamp: datetime
