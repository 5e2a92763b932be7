"""
                        Services Module

Contains the client-side business logic of an ordering session.

Services:
    - cart: cart lines and derived totals
    - catalog: page merging and top dishes
    - order_history: recent orders
    - payment_request: payment payload construction
    - storage: file-locked key-value persistence
    - transport: mock and HTTP catalog/payment collaborators
    - session: orchestration of all of the above
"""

from ordering_client.services.cart import CartLedger, OrderTotals
from ordering_client.services.catalog import CatalogAggregator, compute_top_dishes, merge_page
from ordering_client.services.order_history import OrderHistory
from ordering_client.services.payment_request import PaymentRequestBuilder
from ordering_client.services.price_parser import parse_price
from ordering_client.services.session import OrderingSession
from ordering_client.services.storage import InMemoryStore, JsonFileStore

__all__ = [
    "CartLedger",
    "OrderTotals",
    "CatalogAggregator",
    "compute_top_dishes",
    "merge_page",
    "OrderHistory",
    "PaymentRequestBuilder",
    "parse_price",
    "OrderingSession",
    "InMemoryStore",
    "JsonFileStore",
]
