"""
Cart Ledger

Owns the cart lines of one ordering session and derives every total from
them on demand. Each mutation writes the full line list to the key-value
store; a failed write is logged and otherwise ignored, the in-memory lines
stay authoritative.

Totals:
    subtotal    = sum(unit_price * quantity)
    tax_a       = subtotal * tax_rate
    tax_b       = subtotal * tax_rate
    grand_total = subtotal + tax_a + tax_b

Rounding to whole units (halves away from zero) happens only in the
*_as_int display values.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from pydantic import ValidationError

from ordering_client.core.exceptions import PriceFormatError
from ordering_client.models import CartLine, MenuItem, round_half_up
from ordering_client.services.price_parser import parse_price
from ordering_client.services.storage import KeyValueStore

logger = logging.getLogger(__name__)

CART_KEY = "savedCart"
DEFAULT_TAX_RATE = 0.025


@dataclass(frozen=True)
class OrderTotals:
    """
    Totals derived from a sequence of cart lines.

    The payment payload and the cart display both come from here, so the
    amount charged always equals the amount shown.
    """
    item_count: int
    subtotal: float
    tax_a: float
    tax_b: float

    @property
    def grand_total(self) -> float:
        return self.subtotal + self.tax_a + self.tax_b

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[CartLine],
        tax_rate: float = DEFAULT_TAX_RATE,
    ) -> "OrderTotals":
        lines = list(lines)
        subtotal = sum((line.total_price for line in lines), 0.0)
        return cls(
            item_count=sum(line.quantity for line in lines),
            subtotal=subtotal,
            tax_a=subtotal * tax_rate,
            tax_b=subtotal * tax_rate,
        )


def format_price(amount: float, symbol: str = "₹") -> str:
    """Format an amount for display, e.g. ₹1,234.50."""
    return f"{symbol}{amount:,.2f}"


class CartLedger:
    """
    Mutable collection of cart lines, in insertion order.

    At most one line exists per item id. add_item also matches an existing
    line by display name, so a dish re-fetched in another language (new id,
    same name) keeps incrementing the line already in the cart.

    Example:
        >>> cart = CartLedger(InMemoryStore())
        >>> cart.add_item(MenuItem(id="7", name="Paneer Tikka", price="₹250"), "1")
        >>> cart.grand_total
        262.5
    """

    def __init__(
        self,
        store: KeyValueStore,
        tax_rate: float = DEFAULT_TAX_RATE,
        storage_key: str = CART_KEY,
    ):
        self._store = store
        self._storage_key = storage_key
        self.tax_rate = tax_rate
        self._lines: list[CartLine] = []
        self.load()

    # ==========================================================================
    # READS
    # ==========================================================================

    @property
    def lines(self) -> tuple[CartLine, ...]:
        """Snapshot of the current lines."""
        return tuple(line.model_copy() for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def _find(self, item_id: str) -> Optional[int]:
        for index, line in enumerate(self._lines):
            if line.item_id == item_id:
                return index
        return None

    def quantity_of(self, item_id: str) -> int:
        index = self._find(item_id)
        return 0 if index is None else self._lines[index].quantity

    @property
    def totals(self) -> OrderTotals:
        return OrderTotals.from_lines(self._lines, self.tax_rate)

    @property
    def item_count(self) -> int:
        return self.totals.item_count

    @property
    def subtotal(self) -> float:
        return self.totals.subtotal

    @property
    def tax_a(self) -> float:
        return self.totals.tax_a

    @property
    def tax_b(self) -> float:
        return self.totals.tax_b

    @property
    def grand_total(self) -> float:
        return self.totals.grand_total

    @property
    def subtotal_as_int(self) -> int:
        return round_half_up(self.subtotal)

    @property
    def tax_a_as_int(self) -> int:
        return round_half_up(self.tax_a)

    @property
    def tax_b_as_int(self) -> int:
        return round_half_up(self.tax_b)

    @property
    def grand_total_as_int(self) -> int:
        return round_half_up(self.grand_total)

    # ==========================================================================
    # MUTATIONS
    # ==========================================================================

    def add_item(self, item: MenuItem, cuisine_id: str) -> Optional[CartLine]:
        """
        Add one unit of a dish.

        Returns the affected line, or None when the price could not be
        parsed (nothing is added in that case).
        """
        for line in self._lines:
            if line.item_id == item.id or line.name == item.name:
                line.quantity += 1
                logger.info(
                    f"Increased quantity for {item.name} (ID: {item.id}) "
                    f"to {line.quantity}"
                )
                self._persist()
                return line.model_copy()

        try:
            unit_price = parse_price(item.price)
        except PriceFormatError:
            logger.warning(f"Not adding {item.name} (ID: {item.id}): unparsable price")
            return None

        line = CartLine(
            cuisine_id=cuisine_id,
            item_id=item.id,
            name=item.name,
            unit_price=unit_price,
            quantity=1,
            image_url=item.image_url,
        )
        self._lines.append(line)
        logger.info(
            f"Added {item.name} (ID: {item.id}) in cuisine {cuisine_id} "
            f"at {unit_price}"
        )
        self._persist()
        return line.model_copy()

    def remove_item(self, item_id: str) -> None:
        """Delete every line for item_id."""
        before = len(self._lines)
        self._lines = [line for line in self._lines if line.item_id != item_id]
        logger.debug(f"Removed {before - len(self._lines)} line(s) for {item_id}")
        self._persist()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """
        Set the quantity of an existing line.

        A quantity of zero or less removes the line. Unknown ids are ignored:
        callers add items with add_item first.
        """
        index = self._find(item_id)
        if index is None:
            if quantity > 0:
                logger.warning(f"Tried to update quantity for non-existent item: {item_id}")
            return

        if quantity <= 0:
            del self._lines[index]
            logger.info(f"Removed item {item_id} from cart")
        else:
            self._lines[index].quantity = quantity
            logger.info(f"Updated quantity for item {item_id} to {quantity}")
        self._persist()

    def clear(self) -> None:
        """Empty the cart."""
        self._lines.clear()
        logger.info("Cart cleared")
        self._persist()

    # ==========================================================================
    # PERSISTENCE
    # ==========================================================================

    def _persist(self) -> None:
        records = [line.to_record() for line in self._lines]
        try:
            self._store.set(self._storage_key, records)
        except Exception as e:
            logger.warning(f"Could not save cart: {e}")

    def load(self) -> None:
        """Replace the in-memory lines with the persisted ones, if readable."""
        try:
            records = self._store.get(self._storage_key) or []
            self._lines = [CartLine.model_validate(record) for record in records]
        except (ValidationError, TypeError) as e:
            logger.warning(f"Discarding unreadable saved cart: {e}")
            self._lines = []
        except Exception as e:
            logger.warning(f"Could not load cart: {e}")
            self._lines = []
        logger.debug(f"Loaded {len(self._lines)} cart line(s)")
