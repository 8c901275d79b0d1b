"""전략 공통 인터페이스."""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Sequence

from ..data import Candle, StrategySignal


class TradingStrategy(ABC):
    """모든 트리거 전략이 구현해야 하는 기본 인터페이스."""

    @abstractmethod
    def evaluate(self, symbol: str, current_price: Decimal, candles: Sequence[Candle]) -> StrategySignal:
        """현재가와 최근 캔들을 바탕으로 다음 행동을 결정한다."""


__all__ = ["TradingStrategy"]
