import pytest

from ordering_client.core.exceptions import PriceFormatError
from ordering_client.services.price_parser import parse_price


class TestParsePrice:

    @pytest.mark.parametrize("raw, expected", [
        ("250", 250.0),
        ("₹250", 250.0),
        ("₹ 1,250.50", 1250.5),
        ("  99.90  ", 99.9),
        ("$12", 12.0),
        ("1,00,000", 100000.0),
    ])
    def test_direct_parse(self, raw, expected):
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw, expected", [
        ("INR 349", 349.0),
        ("349/-", 349.0),
        ("Price: 120.5 only", 120.5),
    ])
    def test_fallback_strips_non_numeric(self, raw, expected):
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw", ["", "free", "₹", "1.2.3", "nan", "inf"])
    def test_unparsable_raises(self, raw):
        with pytest.raises(PriceFormatError) as exc_info:
            parse_price(raw)
        assert exc_info.value.raw == raw

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_price("n/a")
