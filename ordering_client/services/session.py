"""
Ordering Session

Application-level orchestrator for one customer session. It owns the cart,
the order history, the catalog working set and the transport, and composes
them into the flows a front end needs:

    - load_catalog / load_more: paginate the catalog, first load also
      computes top dishes
    - set_language: drop catalog state and reload in another language
    - place_order: build payload → submit payment → record order → clear cart

A session is an explicit object passed to whoever needs it; there is no
module-level instance.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ordering_client.core.cancellation import CancellationToken, LoadCancelled
from ordering_client.core.config import Language, Settings
from ordering_client.core.exceptions import (
    EmptyCartError,
    NotFound,
    OrderingError,
    ServerError,
    TransportError,
)
from ordering_client.models import Cuisine, MenuItem, Order
from ordering_client.services.cart import CartLedger
from ordering_client.services.catalog import CatalogAggregator
from ordering_client.services.order_history import OrderHistory
from ordering_client.services.payment_request import PaymentRequestBuilder
from ordering_client.services.storage import JsonFileStore, KeyValueStore
from ordering_client.services.transport import BaseTransport, create_transport

logger = logging.getLogger(__name__)


def error_message_key(exc: BaseException) -> str:
    """Localization key a front end shows for an error."""
    if isinstance(exc, EmptyCartError):
        return "empty_cart"
    if isinstance(exc, NotFound):
        return "no_cuisines"
    if isinstance(exc, ServerError):
        return "payment_failed" if exc.status_code == 402 else "server_error"
    if isinstance(exc, TransportError):
        return "connection_error"
    return "unknown_error"


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of a successful checkout."""
    transaction_reference: str
    order: Order


class OrderingSession:
    """
    One customer's cart, history and catalog view.

    Example:
        >>> session = OrderingSession.from_settings(get_settings())
        >>> await session.load_catalog()
        >>> session.cart.add_item(session.cuisines[0].items[0], session.cuisines[0].id)
        >>> result = await session.place_order()
    """

    def __init__(
        self,
        transport: BaseTransport,
        store: KeyValueStore,
        settings: Settings,
    ):
        self.settings = settings
        self.transport = transport
        self.store = store
        self.language = settings.default_language

        self.cart = CartLedger(store, tax_rate=settings.tax_rate)
        self.history = OrderHistory(store, capacity=settings.order_history_capacity)
        self.payments = PaymentRequestBuilder(tax_rate=settings.tax_rate)
        self.catalog = CatalogAggregator(
            transport,
            page_size=settings.catalog_page_size,
            sample_pages=settings.top_dish_sample_pages,
            sample_target=settings.top_dish_sample_target,
            min_rating=settings.top_dish_min_rating,
            top_dish_count=settings.top_dish_count,
        )

        self.is_loading = False
        self.error: Optional[str] = None
        self._load_token: Optional[CancellationToken] = None

        logger.info(
            f"Session ready (transport={transport.provider_name}, "
            f"cart_lines={len(self.cart)}, orders={len(self.history)})"
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrderingSession":
        return cls(
            transport=create_transport(settings),
            store=JsonFileStore.from_settings(settings),
            settings=settings,
        )

    @property
    def cuisines(self) -> list[Cuisine]:
        return self.catalog.cuisines

    @property
    def top_dishes(self) -> list[MenuItem]:
        return self.catalog.top_dishes

    # ==========================================================================
    # CATALOG
    # ==========================================================================

    def _new_load_token(self) -> CancellationToken:
        if self._load_token is not None:
            self._load_token.cancel()
        self._load_token = CancellationToken(f"catalog load ({self.language.value})")
        return self._load_token

    async def load_catalog(self, force_refresh: bool = False) -> bool:
        """
        Load the next catalog page.

        A forced refresh cancels any load in flight and starts over from
        page 1; otherwise a call made while loading is ignored. The first
        successful load also computes top dishes. Errors are recorded as a
        localization key in `error` only while nothing is loaded; later
        failures just stop the current attempt.

        Returns:
            bool: True if new cuisines were added
        """
        if force_refresh:
            token = self._new_load_token()
            self.catalog.reset()
        elif self.is_loading or not self.catalog.has_more_pages:
            return False
        else:
            token = self._new_load_token()

        self.is_loading = True
        self.error = None
        try:
            added = await self.catalog.load_next_page(token, self.language)
            if added and not self.catalog.top_dishes_loaded:
                await self.catalog.load_top_dishes(token, self.language)
            return added
        except LoadCancelled:
            logger.info("Catalog load superseded; results discarded")
            return False
        except NotFound as e:
            self.error = error_message_key(e)
            return False
        except OrderingError as e:
            logger.error(f"Error loading data: {e}")
            if not self.catalog.cuisines:
                self.error = error_message_key(e)
            return False
        finally:
            if self._load_token is token:
                self.is_loading = False

    async def load_more(self) -> bool:
        """Load the following page, if any."""
        return await self.load_catalog()

    async def set_language(self, language: Language) -> None:
        """Switch catalog language and reload from the first page."""
        if language == self.language:
            return
        logger.info(f"Language changed to {language.display_name}")
        self.language = language
        await self.load_catalog(force_refresh=True)

    async def toggle_language(self) -> Language:
        """Switch between English and Hindi; returns the new language."""
        await self.set_language(self.language.toggled())
        return self.language

    async def fetch_item(self, item_id: str) -> MenuItem:
        return await self.transport.fetch_item(item_id, self.language)

    # ==========================================================================
    # CHECKOUT
    # ==========================================================================

    async def place_order(self) -> CheckoutResult:
        """
        Pay for the cart and record the order.

        The cart is cleared only after the payment call succeeded.

        Raises:
            EmptyCartError: if the cart is empty
            ServerError, TransportError: if the payment failed
        """
        lines = self.cart.lines
        payload = self.payments.build(lines)
        grand_total = self.cart.grand_total

        logger.info(f"Placing order: {payload.total_items} items, total {payload.total_amount}")
        try:
            txn_ref = await self.transport.submit_payment(payload)
        except OrderingError as e:
            logger.error(f"Order placement failed: {e}")
            raise

        order = self.history.record_order(lines, grand_total, transaction_reference=txn_ref)
        self.cart.clear()
        logger.info(f"Order {order.id} placed (txn {txn_ref})")
        return CheckoutResult(transaction_reference=txn_ref, order=order)

    async def aclose(self) -> None:
        if self._load_token is not None:
            self._load_token.cancel()
        await self.transport.aclose()
