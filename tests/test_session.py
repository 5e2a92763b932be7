import asyncio

import pytest

from ordering_client.core.config import Language
from ordering_client.core.exceptions import EmptyCartError, NotFound, ServerError, TransportError
from ordering_client.services.session import OrderingSession, error_message_key
from ordering_client.services.storage import InMemoryStore
from ordering_client.services.transport.mock import MockTransport

from conftest import ScriptedTransport, make_cuisine, make_item


def localized_page(language):
    name = "उत्तर भारतीय" if language is Language.HINDI else "North Indian"
    return [make_cuisine("1", [make_item("11", rating="4.9")], name=name)]


class TestCatalogLoading:

    async def test_first_load_computes_top_dishes(self, settings, store, catalog_pages):
        session = OrderingSession(ScriptedTransport(pages=catalog_pages), store, settings)

        assert await session.load_catalog() is True
        assert [c.id for c in session.cuisines] == ["1", "2"]
        assert [d.id for d in session.top_dishes] == ["12", "31", "11"]
        assert session.is_loading is False
        assert session.error is None

    async def test_load_more_until_done(self, settings, store, catalog_pages):
        session = OrderingSession(ScriptedTransport(pages=catalog_pages), store, settings)
        await session.load_catalog()

        assert await session.load_more() is True
        assert await session.load_more() is False
        assert await session.load_more() is False
        assert [c.id for c in session.cuisines] == ["1", "2", "3"]
        assert session.error is None

    async def test_empty_catalog_sets_error(self, settings, store):
        session = OrderingSession(ScriptedTransport(pages={}), store, settings)

        assert await session.load_catalog() is False
        assert session.error == "no_cuisines"

    async def test_failure_before_anything_loaded(self, settings, store):
        transport = ScriptedTransport(pages={1: TransportError("offline")})
        session = OrderingSession(transport, store, settings)

        assert await session.load_catalog() is False
        assert session.error == "connection_error"

    async def test_failure_after_first_page_keeps_state(self, settings, store, catalog_pages):
        transport = ScriptedTransport(pages=catalog_pages)
        session = OrderingSession(transport, store, settings)
        await session.load_catalog()

        transport.pages = {2: ServerError("boom", 500)}
        assert await session.load_more() is False
        assert session.error is None
        assert len(session.cuisines) == 2

    async def test_language_switch_discards_stale_load(self, settings, store):
        gate = asyncio.Event()
        transport = ScriptedTransport(pages={1: localized_page}, gate=gate)
        session = OrderingSession(transport, store, settings)

        stale = asyncio.create_task(session.load_catalog())
        while not transport.page_calls:
            await asyncio.sleep(0)

        await session.set_language(Language.HINDI)
        gate.set()

        assert await stale is False
        assert session.language is Language.HINDI
        assert [c.name for c in session.cuisines] == ["उत्तर भारतीय"]
        assert session.is_loading is False

    async def test_toggle_language_reloads(self, settings, store):
        transport = ScriptedTransport(pages={1: localized_page})
        session = OrderingSession(transport, store, settings)
        await session.load_catalog()

        assert await session.toggle_language() is Language.HINDI
        assert [c.name for c in session.cuisines] == ["उत्तर भारतीय"]
        assert await session.toggle_language() is Language.ENGLISH
        assert [c.name for c in session.cuisines] == ["North Indian"]

    async def test_same_language_does_not_reload(self, settings, store, catalog_pages):
        transport = ScriptedTransport(pages=catalog_pages)
        session = OrderingSession(transport, store, settings)
        await session.set_language(Language.ENGLISH)

        assert transport.page_calls == []


class TestPlaceOrder:

    async def test_success_records_order_and_clears_cart(self, settings, store):
        transport = MockTransport()
        session = OrderingSession(transport, store, settings)
        await session.load_catalog()
        cuisine = session.cuisines[0]
        session.cart.add_item(cuisine.items[0], cuisine.id)
        session.cart.add_item(cuisine.items[0], cuisine.id)
        expected_total = session.cart.grand_total

        result = await session.place_order()

        assert result.transaction_reference.startswith("txn_mock_")
        assert session.cart.is_empty
        assert session.history.orders[0] == result.order
        assert result.order.total_amount == expected_total
        assert result.order.item_count == 2
        assert transport.payments[0].total_amount == f"{expected_total:.2f}"

    async def test_declined_payment_keeps_cart(self, settings, store):
        session = OrderingSession(MockTransport(failure_rate=1.0), store, settings)
        session.cart.add_item(make_item("101", price="₹350"), "1")

        with pytest.raises(ServerError) as exc_info:
            await session.place_order()

        assert error_message_key(exc_info.value) == "payment_failed"
        assert session.cart.quantity_of("101") == 1
        assert len(session.history) == 0

    async def test_empty_cart(self, settings, store):
        transport = ScriptedTransport()
        session = OrderingSession(transport, store, settings)

        with pytest.raises(EmptyCartError):
            await session.place_order()
        assert transport.payments == []

    async def test_history_survives_new_session(self, settings, catalog_pages):
        store = InMemoryStore()
        session = OrderingSession(ScriptedTransport(pages=catalog_pages), store, settings)
        session.cart.add_item(make_item("11", price="₹250"), "1")
        result = await session.place_order()

        restored = OrderingSession(ScriptedTransport(), store, settings)
        assert restored.history.get(result.order.id) is not None
        assert restored.cart.is_empty

    async def test_aclose(self, settings, store):
        transport = ScriptedTransport()
        session = OrderingSession(transport, store, settings)
        await session.aclose()
        assert transport.closed


class TestErrorMessageKey:

    @pytest.mark.parametrize("exc, key", [
        (EmptyCartError(), "empty_cart"),
        (NotFound(), "no_cuisines"),
        (ServerError("declined", 402), "payment_failed"),
        (ServerError("boom", 500), "server_error"),
        (TransportError("offline"), "connection_error"),
        (RuntimeError("?"), "unknown_error"),
    ])
    def test_mapping(self, exc, key):
        assert error_message_key(exc) == key
