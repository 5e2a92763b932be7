import pytest

from ordering_client.core.exceptions import EmptyCartError
from ordering_client.models import CartLine
from ordering_client.services.cart import CartLedger
from ordering_client.services.payment_request import PaymentRequestBuilder, coerce_id

from conftest import make_item


class TestPaymentRequestBuilder:

    def test_empty_cart_rejected(self):
        with pytest.raises(EmptyCartError):
            PaymentRequestBuilder().build([])

    def test_payload_fields(self, store):
        cart = CartLedger(store)
        cart.add_item(make_item("7", price="₹250"), "1")
        cart.add_item(make_item("7", price="₹250"), "1")
        cart.add_item(make_item("12", price="₹99.50"), "3")

        payload = PaymentRequestBuilder().build(cart.lines)

        assert payload.total_amount == f"{cart.grand_total:.2f}"
        assert payload.total_items == 3
        assert payload.model_dump() == {
            "total_amount": payload.total_amount,
            "total_items": 3,
            "data": [
                {"cuisine_id": 1, "item_id": 7, "item_price": 250, "item_quantity": 2},
                {"cuisine_id": 3, "item_id": 12, "item_price": 100, "item_quantity": 1},
            ],
        }

    def test_total_amount_has_two_decimals(self, store):
        cart = CartLedger(store)
        cart.add_item(make_item("7", price="₹250"), "1")

        payload = PaymentRequestBuilder().build(cart.lines)
        assert payload.total_amount == "262.50"

    def test_half_unit_price_rounds_up(self, store):
        cart = CartLedger(store)
        cart.add_item(make_item("7", price="₹98.50"), "1")

        payload = PaymentRequestBuilder().build(cart.lines)
        assert payload.data[0].item_price == 99
        assert cart.lines[0].price_as_int == 99

    def test_non_numeric_ids_sent_as_zero(self):
        line = CartLine(
            cuisine_id="north-indian",
            item_id="abc",
            name="Mystery",
            unit_price=10.0,
            quantity=1,
        )
        payload = PaymentRequestBuilder().build([line])

        assert payload.data[0].cuisine_id == 0
        assert payload.data[0].item_id == 0


class TestCoerceId:

    @pytest.mark.parametrize("value, expected", [("42", 42), (" 7 ", 7), ("x1", 0), ("", 0)])
    def test_values(self, value, expected):
        assert coerce_id(value, "item_id") == expected
