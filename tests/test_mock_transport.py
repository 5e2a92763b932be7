import pytest

from ordering_client.core.config import Language
from ordering_client.core.exceptions import NotFound, ServerError
from ordering_client.schemas import PaymentLine, PaymentPayload
from ordering_client.services.transport.mock import SAMPLE_CATALOG, MockTransport


PAYLOAD = PaymentPayload(
    total_amount="105.00",
    total_items=1,
    data=[PaymentLine(cuisine_id=1, item_id=101, item_price=100, item_quantity=1)],
)


class TestMockCatalog:

    async def test_pages_then_not_found(self):
        transport = MockTransport()
        first = await transport.fetch_catalog_page(1, 4)
        second = await transport.fetch_catalog_page(2, 4)

        assert len(first) == 4
        assert len(first) + len(second) == len(SAMPLE_CATALOG)
        with pytest.raises(NotFound):
            await transport.fetch_catalog_page(3, 4)

    async def test_language(self):
        transport = MockTransport()
        english = await transport.fetch_catalog_page(1, 10, Language.ENGLISH)
        hindi = await transport.fetch_catalog_page(1, 10, Language.HINDI)

        assert [c.id for c in english] == [c.id for c in hindi]
        assert english[0].name != hindi[0].name

    async def test_rating_filter(self):
        cuisines = await MockTransport().fetch_filtered_catalog(min_rating=4.8)
        ratings = [item.rating_value for c in cuisines for item in c.items]

        assert ratings
        assert all(rating >= 4.8 for rating in ratings)

    async def test_fetch_item(self):
        transport = MockTransport()
        assert (await transport.fetch_item("601")).name == "Gulab Jamun"
        with pytest.raises(ServerError) as exc_info:
            await transport.fetch_item("nope")
        assert exc_info.value.status_code == 404


class TestMockPayment:

    async def test_success_records_payload(self):
        transport = MockTransport()
        txn = await transport.submit_payment(PAYLOAD)

        assert txn.startswith("txn_mock_")
        assert transport.payments == [PAYLOAD]

    async def test_decline(self):
        transport = MockTransport(failure_rate=1.0)
        with pytest.raises(ServerError) as exc_info:
            await transport.submit_payment(PAYLOAD)

        assert exc_info.value.status_code == 402
        assert transport.payments == []
