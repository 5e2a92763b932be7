"""
Recent Orders

Bounded log of completed orders, newest first. Only the latest
`capacity` orders are kept; a store inflated by an older build or by hand
is truncated on load.
"""

import logging
import uuid
from datetime import datetime
from typing import Iterable, Optional

from pydantic import ValidationError

from ordering_client.models import CartLine, Order, OrderItem
from ordering_client.services.storage import KeyValueStore

logger = logging.getLogger(__name__)

ORDERS_KEY = "savedOrders"
DEFAULT_CAPACITY = 3


class OrderHistory:
    """Newest-first list of at most `capacity` orders, persisted on change."""

    def __init__(
        self,
        store: KeyValueStore,
        capacity: int = DEFAULT_CAPACITY,
        storage_key: str = ORDERS_KEY,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._store = store
        self._storage_key = storage_key
        self.capacity = capacity
        self._orders: list[Order] = []
        self.load()

    @property
    def orders(self) -> tuple[Order, ...]:
        return tuple(self._orders)

    def __len__(self) -> int:
        return len(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def record_order(
        self,
        lines: Iterable[CartLine],
        total_amount: float,
        transaction_reference: Optional[str] = None,
    ) -> Order:
        """
        Snapshot the given lines into a new order and put it first.

        Args:
            lines: Cart lines at the time of payment
            total_amount: Grand total that was charged
            transaction_reference: Reference returned by the payment call

        Returns:
            Order: The recorded order
        """
        items = tuple(
            OrderItem(
                id=line.item_id,
                name=line.name,
                price=f"{line.unit_price:.2f}",
                quantity=line.quantity,
                image_url=line.image_url,
            )
            for line in lines
        )
        order = Order(
            id=str(uuid.uuid4()),
            placed_at=datetime.now(),
            items=items,
            total_amount=total_amount,
            transaction_reference=transaction_reference,
        )

        self._orders.insert(0, order)
        del self._orders[self.capacity:]
        logger.info(
            f"Recorded order {order.id} ({order.item_count} items, "
            f"total {total_amount:.2f}); keeping {len(self._orders)}"
        )
        self._persist()
        return order

    def clear(self) -> None:
        self._orders.clear()
        self._persist()

    def _persist(self) -> None:
        try:
            self._store.set(self._storage_key, [order.to_record() for order in self._orders])
        except Exception as e:
            logger.warning(f"Could not save order history: {e}")

    def load(self) -> list[Order]:
        """Read persisted orders, keep the newest `capacity`, and return them."""
        try:
            records = self._store.get(self._storage_key) or []
            orders = [Order.model_validate(record) for record in records]
        except (ValidationError, TypeError) as e:
            logger.warning(f"Discarding unreadable order history: {e}")
            orders = []
        except Exception as e:
            logger.warning(f"Could not load order history: {e}")
            orders = []

        if len(orders) > self.capacity:
            logger.info(f"Truncating stored history from {len(orders)} to {self.capacity}")
        self._orders = orders[: self.capacity]
        return list(self._orders)
