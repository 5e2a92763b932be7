import json

import httpx
import pytest

from ordering_client.core.config import Language
from ordering_client.core.exceptions import NotFound, ServerError, TransportError
from ordering_client.schemas import PaymentLine, PaymentPayload
from ordering_client.services.transport.http import HttpTransport
from ordering_client.services.transport.retry import retry_with_backoff

BASE_URL = "https://api.test"

CATALOG_BODY = {
    "response_code": 200,
    "outcome_code": 200,
    "response_message": "Success",
    "page": 1,
    "count": 10,
    "total_pages": 1,
    "total_items": 1,
    "cuisines": [{
        "cuisine_id": "1",
        "cuisine_name": "North Indian",
        "cuisine_image_url": "https://img.test/c1.jpg",
        "items": [
            {"id": "11", "name": "Butter Chicken", "image_url": "https://img.test/11.jpg",
             "price": "₹350", "rating": "4.7"},
        ],
    }],
}

PAYLOAD = PaymentPayload(
    total_amount="367.50",
    total_items=1,
    data=[PaymentLine(cuisine_id=1, item_id=11, item_price=350, item_quantity=1)],
)


def make_transport(handler, **kwargs) -> HttpTransport:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    kwargs.setdefault("backoff_base", 0.0)
    return HttpTransport(BASE_URL, api_key="partner-key", client=client, **kwargs)


class TestCatalogRequests:

    async def test_page_request_and_decode(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=CATALOG_BODY)

        transport = make_transport(handler)
        cuisines = await transport.fetch_catalog_page(2, 10, Language.HINDI)

        request = seen[0]
        assert request.method == "POST"
        assert request.url.path == "/emulator/interview/get_item_list"
        assert request.headers["X-Partner-API-Key"] == "partner-key"
        assert request.headers["X-Forward-Proxy-Action"] == "get_item_list"
        assert request.headers["Accept-Language"] == "hi"
        assert json.loads(request.content) == {"page": 2, "count": 10, "language": "hi"}

        assert cuisines[0].id == "1"
        assert cuisines[0].items[0].name == "Butter Chicken"

    async def test_no_cuisines_is_not_found_without_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(404, json={"response_message": "No Cuisines Found"})

        transport = make_transport(handler)
        with pytest.raises(NotFound):
            await transport.fetch_catalog_page(9, 10)
        assert len(calls) == 1

    async def test_server_error_retried_then_raised(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, text="upstream exploded")

        transport = make_transport(handler, max_retries=3)
        with pytest.raises(ServerError) as exc_info:
            await transport.fetch_catalog_page(1, 10)

        assert exc_info.value.status_code == 500
        assert len(calls) == 4

    async def test_recovers_after_transient_failure(self):
        responses = [httpx.Response(503), httpx.Response(200, json=CATALOG_BODY)]

        transport = make_transport(lambda request: responses.pop(0))
        cuisines = await transport.fetch_catalog_page(1, 10)
        assert len(cuisines) == 1

    async def test_connection_error_is_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = make_transport(handler, max_retries=0)
        with pytest.raises(TransportError):
            await transport.fetch_catalog_page(1, 10)

    async def test_malformed_body_is_transport_error(self):
        transport = make_transport(lambda request: httpx.Response(200, json={"cuisines": "?"}), max_retries=0)
        with pytest.raises(TransportError):
            await transport.fetch_catalog_page(1, 10)

    async def test_filter_body(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json=CATALOG_BODY)

        transport = make_transport(handler)
        await transport.fetch_filtered_catalog(
            min_rating=4.8, cuisine_types=["North Indian"], min_price=100, max_price=500,
        )

        assert seen[0] == {
            "language": "en",
            "cuisine_type": ["North Indian"],
            "price_range": {"min_amount": 100, "max_amount": 500},
            "min_rating": 4.8,
        }

    async def test_fetch_item(self):
        def handler(request):
            return httpx.Response(200, json={
                "response_code": 200,
                "outcome_code": 200,
                "response_message": "Success",
                "item_id": "11",
                "item_name": "Butter Chicken",
                "item_price": "₹350",
                "item_rating": "4.7",
                "item_image_url": "https://img.test/11.jpg",
            })

        item = await make_transport(handler).fetch_item("11")
        assert item.id == "11"
        assert item.rating_value == 4.7


class TestPayment:

    async def test_success_returns_transaction_reference(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={
                "response_code": 200, "outcome_code": 200,
                "response_message": "Success", "txn_ref_no": "TXN123",
            })

        assert await make_transport(handler).submit_payment(PAYLOAD) == "TXN123"
        assert seen[0] == {
            "total_amount": "367.50",
            "total_items": 1,
            "data": [{"cuisine_id": 1, "item_id": 11, "item_price": 350, "item_quantity": 1}],
        }

    async def test_error_details_preferred(self):
        def handler(request):
            return httpx.Response(400, json={
                "response_code": 400, "outcome_code": 400,
                "response_message": "Bad Request", "error_details": "Invalid amount",
            })

        with pytest.raises(ServerError) as exc_info:
            await make_transport(handler).submit_payment(PAYLOAD)
        assert exc_info.value.message == "Invalid amount"
        assert exc_info.value.status_code == 400

    async def test_missing_transaction_reference_fails(self):
        def handler(request):
            return httpx.Response(200, json={
                "response_code": 200, "outcome_code": 200, "response_message": "Pending",
            })

        with pytest.raises(ServerError):
            await make_transport(handler).submit_payment(PAYLOAD)

    async def test_payment_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"response_message": "Internal error"})

        with pytest.raises(ServerError):
            await make_transport(handler).submit_payment(PAYLOAD)
        assert len(calls) == 1


class TestLifecycle:

    def test_api_key_required(self):
        with pytest.raises(ValueError):
            HttpTransport(BASE_URL, api_key="")

    async def test_health_check(self):
        ok = make_transport(lambda request: httpx.Response(200, json=CATALOG_BODY))
        empty = make_transport(lambda request: httpx.Response(200, text="No Cuisines Found"))
        down = make_transport(lambda request: httpx.Response(502), max_retries=0)

        assert await ok.health_check() is True
        assert await empty.health_check() is True
        assert await down.health_check() is False


class TestRetry:

    async def test_base_delay_doubles(self):
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        async def operation():
            raise ServerError("boom", 500)

        with pytest.raises(ServerError):
            await retry_with_backoff(operation, max_retries=2, base_delay=0.25, sleep=fake_sleep)
        assert delays == [0.25, 0.5]

    async def test_returns_result_after_failures(self):
        outcomes = [TransportError("offline"), ServerError("busy", 503), "ok"]
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)

        async def operation():
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert await retry_with_backoff(operation, sleep=fake_sleep) == "ok"
        assert delays == [0.5, 1.0]

    async def test_other_errors_not_retried(self):
        attempts = []

        async def operation():
            attempts.append(1)
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            await retry_with_backoff(operation, sleep=pytest.fail)
        assert len(attempts) == 1

    async def test_delays_between_attempts(self):
        delays = []
        attempts = []

        async def fake_sleep(delay):
            delays.append(delay)

        async def operation():
            attempts.append(1)
            raise TransportError("offline")

        with pytest.raises(TransportError):
            await retry_with_backoff(operation, max_retries=3, sleep=fake_sleep)

        assert len(attempts) == 4
        assert delays == [0.5, 1.0, 2.0]

    async def test_not_found_never_retried(self):
        attempts = []

        async def operation():
            attempts.append(1)
            raise NotFound()

        with pytest.raises(NotFound):
            await retry_with_backoff(operation, sleep=pytest.fail)
        assert len(attempts) == 1
