"""직전 캔들 종가 대비 현재가 방향을 따라가는 단순 전략."""

from __future__ import annotations

from decimal import Decimal
from typing import Sequence

from ..data import Candle, SignalAction, StrategySignal
from .base import TradingStrategy


class PriceMovementStrategy(TradingStrategy):
    """현재가가 직전 캔들 종가보다 높으면 매수, 낮으면 매도, 같으면 관망한다."""

    def evaluate(self, symbol: str, current_price: Decimal, candles: Sequence[Candle]) -> StrategySignal:
        if not candles:
            raise ValueError("최소 한 개 이상의 캔들이 필요합니다.")
        # 응답의 첫 캔들이 직전 캔들이다.
        previous_close = candles[0].close
        if current_price > previous_close:
            action, reason = SignalAction.BUY, "가격 상승"
        elif current_price < previous_close:
            action, reason = SignalAction.SELL, "가격 하락"
        else:
            action, reason = SignalAction.HOLD, "가격 변동 없음"
        return StrategySignal(
            symbol=symbol,
            action=action,
            price=current_price,
            reference_price=previous_close,
            reason=reason,
        )


__all__ = ["PriceMovementStrategy"]
