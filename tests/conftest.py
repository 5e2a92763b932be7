"""
Shared fixtures: catalog builders, a scripted transport and settings that
never read the developer's .env file.
"""

import asyncio
from typing import Callable, Optional, Sequence

import pytest

from ordering_client.core.config import EnvironmentMode, Language, Settings
from ordering_client.core.exceptions import NotFound, ServerError
from ordering_client.models import Cuisine, MenuItem
from ordering_client.schemas import PaymentPayload
from ordering_client.services.storage import InMemoryStore
from ordering_client.services.transport.base import BaseTransport


def make_item(item_id: str, name: Optional[str] = None, price: str = "₹100", rating: str = "4.0") -> MenuItem:
    return MenuItem(
        id=item_id,
        name=name or f"Dish {item_id}",
        image_url=f"https://img.test/{item_id}.jpg",
        price=price,
        rating=rating,
    )


def make_cuisine(cuisine_id: str, items: Sequence[MenuItem] = (), name: Optional[str] = None) -> Cuisine:
    return Cuisine(
        id=cuisine_id,
        name=name or f"Cuisine {cuisine_id}",
        image_url=f"https://img.test/c{cuisine_id}.jpg",
        items=tuple(items),
    )


class ScriptedTransport(BaseTransport):
    """
    Transport answering from fixed data.

    pages maps a page number to a list of cuisines or an exception to raise;
    missing pages raise NotFound like the real API.
    """

    def __init__(
        self,
        pages: Optional[dict] = None,
        filtered=None,
        payment=None,
        items: Optional[dict[str, MenuItem]] = None,
        on_fetch: Optional[Callable[[int, Language], None]] = None,
        gate: Optional[asyncio.Event] = None,
    ):
        self.pages = pages or {}
        self.filtered = filtered if filtered is not None else []
        self.payment = payment if payment is not None else "txn_test_1"
        self.items = items or {}
        self.on_fetch = on_fetch
        self.gate = gate
        self.page_calls: list[tuple[int, Language]] = []
        self.filter_calls: list[Optional[float]] = []
        self.payments: list[PaymentPayload] = []
        self.closed = False

    @property
    def provider_name(self) -> str:
        return "scripted"

    async def fetch_catalog_page(self, page, count, language=Language.ENGLISH):
        self.page_calls.append((page, language))
        if self.gate is not None:
            gate, self.gate = self.gate, None
            await gate.wait()
        if self.on_fetch is not None:
            self.on_fetch(page, language)
        result = self.pages.get(page)
        if result is None:
            raise NotFound()
        if callable(result):
            result = result(language)
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def fetch_filtered_catalog(self, min_rating=None, cuisine_types=None,
                                     min_price=None, max_price=None,
                                     language=Language.ENGLISH):
        self.filter_calls.append(min_rating)
        if isinstance(self.filtered, Exception):
            raise self.filtered
        return list(self.filtered)

    async def fetch_item(self, item_id, language=Language.ENGLISH):
        if item_id not in self.items:
            raise ServerError(f"Item {item_id} not found", status_code=404)
        return self.items[item_id]

    async def submit_payment(self, payload):
        self.payments.append(payload)
        if isinstance(self.payment, Exception):
            raise self.payment
        return self.payment

    async def health_check(self):
        return True

    async def aclose(self):
        self.closed = True


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        env_mode=EnvironmentMode.DEVELOPMENT,
        data_directory=str(tmp_path / "data"),
    )


@pytest.fixture
def catalog_pages() -> dict:
    """Two pages of cuisines with a duplicate cuisine on page 2."""
    return {
        1: [
            make_cuisine("1", [make_item("11", rating="4.5", price="₹250"),
                               make_item("12", rating="4.9", price="₹120")]),
            make_cuisine("2", [make_item("21", rating="3.2", price="₹80")]),
        ],
        2: [
            make_cuisine("2", [make_item("21", rating="3.2", price="₹80")]),
            make_cuisine("3", [make_item("31", rating="4.7", price="₹1,050")]),
        ],
    }
