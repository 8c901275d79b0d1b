"""가격 변동 시그널을 시장가 주문으로 연결하는 트레이딩 엔진."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping, Optional

import structlog

from ..clients.bingx import BingXAPIError, BingXClient, BingXError
from ..data import to_decimal
from ..strategies.base import TradingStrategy
from ..strategies.price_movement import PriceMovementStrategy

logger = structlog.get_logger(__name__)


class TradingEngine:
    """심볼 하나에 대해 전략을 한 번 평가하고 필요하면 고정 수량 주문을 낸다."""

    def __init__(
        self,
        *,
        client: BingXClient,
        strategy: Optional[TradingStrategy] = None,
        quantity: Decimal = Decimal("0.01"),
        candle_interval: str = "1m",
    ) -> None:
        if quantity <= Decimal("0"):
            raise ValueError("quantity 는 양수여야 합니다.")
        self._client = client
        self._strategy = strategy or PriceMovementStrategy()
        self._quantity = quantity
        self._interval = candle_interval

    async def run_cycle(self, symbol: str) -> Optional[Any]:
        """현재가 조회 → 최근 캔들 2개 조회 → 판단 → 주문.

        가격 변동이 없으면 주문 없이 ``None`` 을 반환한다.
        """

        try:
            current_price = await self._fetch_price(symbol)
            candles = await self._client.get_candles(symbol, self._interval, 2)
            signal = self._strategy.evaluate(symbol, current_price, candles)
            side = signal.side
            if side is None:
                logger.info(
                    "trade_skipped",
                    symbol=symbol,
                    price=str(signal.price),
                    reference_price=str(signal.reference_price),
                    reason=signal.reason,
                )
                return None
            logger.info(
                "trade_signal",
                symbol=symbol,
                side=side.value,
                price=str(signal.price),
                reference_price=str(signal.reference_price),
                quantity=str(self._quantity),
            )
            return await self._client.place_market_order(symbol, side, self._quantity)
        except (BingXError, ValueError) as exc:
            logger.error("trade_cycle_failed", symbol=symbol, error=str(exc))
            raise

    async def _fetch_price(self, symbol: str) -> Decimal:
        payload = await self._client.get_price(symbol)
        price = self._extract_price(payload)
        if price is None:
            raise BingXAPIError("price 데이터 형식이 올바르지 않습니다.", payload=payload)
        return to_decimal(price)

    @staticmethod
    def _extract_price(payload: Any) -> Optional[Any]:
        if not isinstance(payload, Mapping):
            return None
        data = payload.get("data")
        if isinstance(data, Mapping) and "price" in data:
            return data["price"]
        return payload.get("price")


__all__ = ["TradingEngine"]
