"""트리거 전략과 거래 명령에서 사용하는 공용 데이터 모델."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Mapping, Optional, Sequence, Union


def to_decimal(value: object) -> Decimal:
    """다양한 입력을 Decimal 로 변환한다."""

    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool 값은 Decimal 로 변환할 수 없습니다.")
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValueError(f"숫자로 변환할 수 없는 값: {value!r}") from exc
    raise TypeError(f"Decimal 로 변환할 수 없는 타입: {type(value)!r}")


def _to_datetime(value: object) -> datetime:
    """밀리초 단위 epoch 값을 UTC datetime 으로 변환한다."""

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
    if isinstance(value, str) and value.isdigit():
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    raise ValueError(f"시간 값을 변환할 수 없습니다: {value!r}")


class OrderSide(str, Enum):
    """주문 방향."""

    BUY = "BUY"
    SELL = "SELL"


class PositionSide(str, Enum):
    """포지션 방향."""

    LONG = "LONG"
    SHORT = "SHORT"


class OrderType(str, Enum):
    """BingX 주문 유형."""

    MARKET = "MARKET"
    LIMIT = "LIMIT"
    STOP_MARKET = "STOP_MARKET"
    TAKE_PROFIT_MARKET = "TAKE_PROFIT_MARKET"
    TRAILING_STOP_MARKET = "TRAILING_STOP_MARKET"


class SignalAction(str, Enum):
    """전략 의사결정 종류."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True, slots=True)
class Candle:
    """단일 캔들스틱 데이터."""

    symbol: str
    timestamp: datetime
    open: Decimal
    close: Decimal
    high: Decimal
    low: Decimal
    volume: Decimal

    @classmethod
    def from_bingx_payload(cls, symbol: str, payload: Union[Mapping[str, object], Sequence[object]]) -> "Candle":
        """BingX kline 응답 한 건을 Candle 로 변환한다.

        객체 형태(``{"open": ..., "close": ..., "time": ...}``)와
        배열 형태(``[time, open, high, low, close, volume]``)를 모두 받는다.
        """

        if isinstance(payload, Mapping):
            try:
                return cls(
                    symbol=symbol,
                    timestamp=_to_datetime(payload["time"]),
                    open=to_decimal(payload["open"]),
                    close=to_decimal(payload["close"]),
                    high=to_decimal(payload["high"]),
                    low=to_decimal(payload["low"]),
                    volume=to_decimal(payload.get("volume", "0")),
                )
            except KeyError as exc:
                raise ValueError(f"캔들 응답에 {exc.args[0]} 키가 없습니다.") from exc
        if isinstance(payload, (str, bytes)) or len(payload) < 5:
            raise ValueError("캔들 데이터의 요소 수가 부족합니다.")
        time_raw, open_, high, low, close_ = payload[:5]
        volume = payload[5] if len(payload) > 5 else "0"
        return cls(
            symbol=symbol,
            timestamp=_to_datetime(time_raw),
            open=to_decimal(open_),
            close=to_decimal(close_),
            high=to_decimal(high),
            low=to_decimal(low),
            volume=to_decimal(volume),
        )


@dataclass(frozen=True, slots=True)
class StrategySignal:
    """전략에서 생성한 매매 시그널."""

    symbol: str
    action: SignalAction
    price: Decimal
    reference_price: Decimal
    reason: str

    @property
    def side(self) -> Optional[OrderSide]:
        if self.action is SignalAction.BUY:
            return OrderSide.BUY
        if self.action is SignalAction.SELL:
            return OrderSide.SELL
        return None


__all__ = [
    "Candle",
    "OrderSide",
    "OrderType",
    "PositionSide",
    "SignalAction",
    "StrategySignal",
    "to_decimal",
]
