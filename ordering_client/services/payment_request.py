"""
Payment Request Builder

Turns a cart snapshot into the exact body of a make_payment call:

    {
        "total_amount": "262.50",
        "total_items": 1,
        "data": [
            {"cuisine_id": 1, "item_id": 7, "item_price": 250, "item_quantity": 1}
        ]
    }

Totals come from OrderTotals, the same computation the cart displays.
Sending the payload, and any retry, is the transport's job.
"""

import logging
from typing import Sequence

from ordering_client.core.exceptions import EmptyCartError
from ordering_client.models import CartLine
from ordering_client.schemas import PaymentLine, PaymentPayload
from ordering_client.services.cart import DEFAULT_TAX_RATE, OrderTotals

logger = logging.getLogger(__name__)


def coerce_id(value: str, field: str) -> int:
    """Convert a catalog id to int. The upstream expects 0 for non-numeric ids."""
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric {field} {value!r} sent as 0")
        return 0


class PaymentRequestBuilder:
    """Builds PaymentPayload objects from cart lines."""

    def __init__(self, tax_rate: float = DEFAULT_TAX_RATE):
        self.tax_rate = tax_rate

    def build(self, lines: Sequence[CartLine]) -> PaymentPayload:
        """
        Build the payment body for the given lines.

        Raises:
            EmptyCartError: if lines is empty
        """
        if not lines:
            raise EmptyCartError()

        totals = OrderTotals.from_lines(lines, self.tax_rate)
        payload = PaymentPayload(
            total_amount=f"{totals.grand_total:.2f}",
            total_items=totals.item_count,
            data=[
                PaymentLine(
                    cuisine_id=coerce_id(line.cuisine_id, "cuisine_id"),
                    item_id=coerce_id(line.item_id, "item_id"),
                    item_price=line.price_as_int,
                    item_quantity=line.quantity,
                )
                for line in lines
            ],
        )

        logger.debug(
            f"Payment payload: subtotal={totals.subtotal} tax_a={totals.tax_a} "
            f"tax_b={totals.tax_b} total={payload.total_amount}"
        )
        return payload
