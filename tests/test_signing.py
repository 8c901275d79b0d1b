import hashlib
import hmac
from decimal import Decimal

from bxbridge.clients.signing import canonical_query, generate_signature, stringify
from bxbridge.data import OrderSide, OrderType


def test_canonical_query_sorts_keys_and_drops_empty_values() -> None:
    params = {"symbol": "BTC-USDT", "price": "", "activationPrice": 50000, "callbackRate": None}

    assert canonical_query(params) == "activationPrice=50000&symbol=BTC-USDT"


def test_signature_is_independent_of_key_order() -> None:
    first = {"symbol": "BTC-USDT", "side": "BUY", "quantity": Decimal("0.01"), "timestamp": 1700000000000}
    second = {"timestamp": 1700000000000, "quantity": Decimal("0.01"), "side": "BUY", "symbol": "BTC-USDT"}

    assert generate_signature(first, "secret") == generate_signature(second, "secret")


def test_empty_string_values_do_not_change_signature() -> None:
    assert generate_signature({"a": "1", "b": ""}, "secret") == generate_signature({"a": "1"}, "secret")


def test_signature_matches_reference_hmac() -> None:
    expected = hmac.new(b"secret", b"symbol=BTC-USDT&timestamp=123", hashlib.sha256).hexdigest()

    signature = generate_signature({"timestamp": 123, "symbol": "BTC-USDT"}, "secret")

    assert signature == expected
    assert signature == signature.lower()


def test_values_are_percent_encoded_like_uri_components() -> None:
    assert canonical_query({"note": "a b/c&d", "mark": "x!'()*~"}) == "mark=x!'()*~&note=a%20b%2Fc%26d"


def test_stringify_renders_values_in_exchange_format() -> None:
    assert stringify(Decimal("0.0100")) == "0.0100"
    assert stringify(Decimal("1E+2")) == "100"
    assert stringify(1.0) == "1"
    assert stringify(0.01) == "0.01"
    assert stringify(True) == "true"
    assert stringify(OrderSide.SELL) == "SELL"
    assert stringify(OrderType.TRAILING_STOP_MARKET) == "TRAILING_STOP_MARKET"
