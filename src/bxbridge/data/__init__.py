"""데이터 모델 서브패키지."""

from .models import (
    Candle,
    OrderSide,
    OrderType,
    PositionSide,
    SignalAction,
    StrategySignal,
    to_decimal,
)
from .requests import (
    BalanceQuery,
    CancelOrderRequest,
    ClosePositionRequest,
    ExchangeRequest,
    KlinesQuery,
    LimitOrderRequest,
    MarketOrderRequest,
    OpenOrdersQuery,
    PositionsQuery,
    PriceQuery,
    ServerTimeQuery,
    StopLossRequest,
    TakeProfitRequest,
    TrailingStopRequest,
)

__all__ = [
    "BalanceQuery",
    "Candle",
    "CancelOrderRequest",
    "ClosePositionRequest",
    "ExchangeRequest",
    "KlinesQuery",
    "LimitOrderRequest",
    "MarketOrderRequest",
    "OpenOrdersQuery",
    "OrderSide",
    "OrderType",
    "PositionSide",
    "PositionsQuery",
    "PriceQuery",
    "ServerTimeQuery",
    "SignalAction",
    "StopLossRequest",
    "StrategySignal",
    "TakeProfitRequest",
    "TrailingStopRequest",
    "to_decimal",
]
