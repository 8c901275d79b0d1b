"""BingX 거래소 연산별 요청 레코드.

각 레코드는 ``method``/``endpoint`` 클래스 속성과 ``to_params()`` 를 가진다.
연산마다 필요한 필드는 생성자에서 강제되며, 클라이언트는 레코드 종류만 보고
어떤 엔드포인트로 보낼지 결정한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Dict, Union

from .models import OrderSide, OrderType, PositionSide

GET = "GET"
POST = "POST"


@dataclass(frozen=True, slots=True)
class BalanceQuery:
    method: ClassVar[str] = GET
    endpoint: ClassVar[str] = "/openApi/swap/v2/user/balance"

    def to_params(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, slots=True)
class PositionsQuery:
    method: ClassVar[str] = GET
    endpoint: ClassVar[str] = "/openApi/swap/v2/user/positions"

    def to_params(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, slots=True)
class OpenOrdersQuery:
    method: ClassVar[str] = GET
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/openOrders"

    def to_params(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, slots=True)
class ServerTimeQuery:
    method: ClassVar[str] = GET
    endpoint: ClassVar[str] = "/openApi/swap/v2/time"

    def to_params(self) -> Dict[str, Any]:
        return {}


@dataclass(frozen=True, slots=True)
class PriceQuery:
    method: ClassVar[str] = GET
    endpoint: ClassVar[str] = "/openApi/swap/v2/quote/price"

    symbol: str

    def to_params(self) -> Dict[str, Any]:
        return {"symbol": self.symbol}


@dataclass(frozen=True, slots=True)
class KlinesQuery:
    method: ClassVar[str] = GET
    endpoint: ClassVar[str] = "/openApi/swap/v2/quote/klines"

    symbol: str
    interval: str = "1m"
    limit: int = 2

    def __post_init__(self) -> None:
        if self.limit <= 0:
            raise ValueError("limit 값은 1 이상이어야 합니다.")

    def to_params(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "interval": self.interval, "limit": self.limit}


@dataclass(frozen=True, slots=True)
class ClosePositionRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/closePosition"

    symbol: str
    # 거래소가 돌려준 positionSide (LONG, SHORT, BOTH) 를 그대로 보낸다.
    position_side: Union[PositionSide, str]

    def to_params(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "positionSide": self.position_side}


@dataclass(frozen=True, slots=True)
class CancelOrderRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/cancelOrder"

    symbol: str
    order_id: str

    def to_params(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "orderId": self.order_id}


@dataclass(frozen=True, slots=True)
class TrailingStopRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/order"

    symbol: str
    activation_price: Decimal
    callback_rate: Decimal

    def to_params(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "type": OrderType.TRAILING_STOP_MARKET,
            "activationPrice": self.activation_price,
            "callbackRate": self.callback_rate,
        }


@dataclass(frozen=True, slots=True)
class StopLossRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/order"

    symbol: str
    stop_price: Decimal

    def to_params(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "type": OrderType.STOP_MARKET, "stopPrice": self.stop_price}


@dataclass(frozen=True, slots=True)
class TakeProfitRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/order"

    symbol: str
    stop_price: Decimal

    def to_params(self) -> Dict[str, Any]:
        return {"symbol": self.symbol, "type": OrderType.TAKE_PROFIT_MARKET, "stopPrice": self.stop_price}


@dataclass(frozen=True, slots=True)
class MarketOrderRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/order"

    symbol: str
    side: OrderSide
    quantity: Decimal

    def __post_init__(self) -> None:
        if self.quantity <= Decimal("0"):
            raise ValueError("quantity 는 양수여야 합니다.")

    def to_params(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "side": self.side,
            "type": OrderType.MARKET,
            "quantity": self.quantity,
        }


@dataclass(frozen=True, slots=True)
class LimitOrderRequest:
    method: ClassVar[str] = POST
    endpoint: ClassVar[str] = "/openApi/swap/v2/trade/order"

    symbol: str
    side: OrderSide
    quantity: Decimal
    price: Decimal

    def __post_init__(self) -> None:
        if self.quantity <= Decimal("0"):
            raise ValueError("quantity 는 양수여야 합니다.")

    def to_params(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "side": self.side,
            "type": OrderType.LIMIT,
            "quantity": self.quantity,
            "price": self.price,
        }


ExchangeRequest = Union[
    BalanceQuery,
    PositionsQuery,
    OpenOrdersQuery,
    ServerTimeQuery,
    PriceQuery,
    KlinesQuery,
    ClosePositionRequest,
    CancelOrderRequest,
    TrailingStopRequest,
    StopLossRequest,
    TakeProfitRequest,
    MarketOrderRequest,
    LimitOrderRequest,
]


__all__ = [
    "BalanceQuery",
    "CancelOrderRequest",
    "ClosePositionRequest",
    "ExchangeRequest",
    "KlinesQuery",
    "LimitOrderRequest",
    "MarketOrderRequest",
    "OpenOrdersQuery",
    "PositionsQuery",
    "PriceQuery",
    "ServerTimeQuery",
    "StopLossRequest",
    "TakeProfitRequest",
    "TrailingStopRequest",
]
