"""BingX 무기한 선물 Open API 연동 클라이언트."""

from __future__ import annotations

import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import httpx
import structlog

from ..config.settings import AppSettings, get_settings
from ..data import (
    BalanceQuery,
    CancelOrderRequest,
    Candle,
    ClosePositionRequest,
    ExchangeRequest,
    KlinesQuery,
    LimitOrderRequest,
    MarketOrderRequest,
    OpenOrdersQuery,
    OrderSide,
    PositionSide,
    PositionsQuery,
    PriceQuery,
    ServerTimeQuery,
    StopLossRequest,
    TakeProfitRequest,
    TrailingStopRequest,
    to_decimal,
)
from .signing import canonical_query, sign_payload

logger = structlog.get_logger(__name__)

Number = Union[Decimal, float, int, str]


class BingXError(RuntimeError):
    """BingX 연동 오류의 기본 클래스."""


class BingXAPIError(BingXError):
    """거래소 오류 응답 또는 전송 실패."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class BingXCredentialsError(BingXError):
    """API 키가 필요한 호출에 인증 정보가 없을 때 발생."""

    def __init__(self) -> None:
        super().__init__("BingX API Key와 Secret Key가 설정되어야 합니다.")


@dataclass(slots=True)
class _SignedRequestContext:
    method: str
    endpoint: str
    payload: str
    signature: str

    @property
    def encoded(self) -> str:
        """서명까지 붙은 전송용 문자열."""

        if not self.payload:
            return f"signature={self.signature}"
        return f"{self.payload}&signature={self.signature}"


class BingXClient:
    """BingX 인증 REST 호출을 담당하는 비동기 클라이언트.

    모든 요청은 ``timestamp`` 를 덧붙여 서명되며, 재시도나 캐시 없이
    한 번씩만 전송된다.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timestamp_factory: Optional[Callable[[], int]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._api_key = self._settings.bingx_api_key
        self._secret_key = self._settings.bingx_secret_key
        self._client = client or httpx.AsyncClient(
            base_url=str(self._settings.bingx_base_url),
            timeout=self._settings.http_timeout,
        )
        self._owns_client = client is None
        self._timestamp_factory = timestamp_factory or self._default_timestamp

    async def __aenter__(self) -> "BingXClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """내부 HTTP 클라이언트를 종료한다."""

        if self._owns_client:
            await self._client.aclose()

    async def get_account_balance(self) -> Any:
        return await self.execute(BalanceQuery())

    async def get_open_positions(self) -> Any:
        return await self.execute(PositionsQuery())

    async def get_pending_orders(self) -> Any:
        return await self.execute(OpenOrdersQuery())

    async def get_server_time(self) -> Any:
        return await self.execute(ServerTimeQuery())

    async def get_price(self, symbol: str) -> Any:
        return await self.execute(PriceQuery(symbol=symbol))

    async def get_klines(self, symbol: str, interval: str = "1m", limit: int = 2) -> Any:
        return await self.execute(KlinesQuery(symbol=symbol, interval=interval, limit=limit))

    async def get_candles(self, symbol: str, interval: str = "1m", limit: int = 2) -> List[Candle]:
        """kline 응답을 Candle 목록으로 변환해 반환한다."""

        payload = await self.get_klines(symbol, interval, limit)
        data = payload.get("data") if isinstance(payload, Mapping) else None
        if not isinstance(data, list):
            raise BingXAPIError("klines 데이터 형식이 올바르지 않습니다.", payload=payload)
        return [Candle.from_bingx_payload(symbol, entry) for entry in data]

    async def close_position(self, symbol: str, position_side: Union[PositionSide, str]) -> Any:
        return await self.execute(ClosePositionRequest(symbol=symbol, position_side=position_side))

    async def cancel_order(self, symbol: str, order_id: Union[str, int]) -> Any:
        return await self.execute(CancelOrderRequest(symbol=symbol, order_id=str(order_id)))

    async def set_trailing_stop(self, symbol: str, activation_price: Number, callback_rate: Number) -> Any:
        return await self.execute(
            TrailingStopRequest(
                symbol=symbol,
                activation_price=to_decimal(activation_price),
                callback_rate=to_decimal(callback_rate),
            )
        )

    async def set_stop_loss(self, symbol: str, stop_price: Number) -> Any:
        return await self.execute(StopLossRequest(symbol=symbol, stop_price=to_decimal(stop_price)))

    async def set_take_profit(self, symbol: str, stop_price: Number) -> Any:
        return await self.execute(TakeProfitRequest(symbol=symbol, stop_price=to_decimal(stop_price)))

    async def place_market_order(self, symbol: str, side: Union[OrderSide, str], quantity: Number) -> Any:
        """시장가 주문을 생성한다."""

        return await self.execute(
            MarketOrderRequest(symbol=symbol, side=OrderSide(side), quantity=to_decimal(quantity))
        )

    async def place_limit_order(
        self,
        symbol: str,
        side: Union[OrderSide, str],
        quantity: Number,
        price: Number,
    ) -> Any:
        """지정가 주문을 생성한다."""

        return await self.execute(
            LimitOrderRequest(
                symbol=symbol,
                side=OrderSide(side),
                quantity=to_decimal(quantity),
                price=to_decimal(price),
            )
        )

    async def check_server_time(self) -> Optional[int]:
        """로컬 시계와 거래소 서버 시간의 차이(ms)를 확인한다.

        허용 오차를 넘으면 경고만 남기고, 실패해도 예외를 올리지 않는다.
        """

        try:
            payload = await self.get_server_time()
            server_time = int(payload["data"]["serverTime"])
        except (BingXError, KeyError, TypeError, ValueError) as exc:
            logger.error("server_time_check_failed", error=str(exc))
            return None
        local_time = self._timestamp_factory()
        difference = abs(server_time - local_time)
        logger.info("server_time_checked", server_time=server_time, local_time=local_time, difference_ms=difference)
        if difference > self._settings.clock_skew_tolerance_ms:
            logger.warning(
                "clock_skew_detected",
                difference_ms=difference,
                tolerance_ms=self._settings.clock_skew_tolerance_ms,
            )
        return difference

    async def execute(self, request: ExchangeRequest) -> Any:
        """요청 레코드를 해당 엔드포인트 호출로 변환해 전송한다."""

        return await self.request(request.method, request.endpoint, request.to_params())

    async def request(self, method: str, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """서명된 요청을 전송하고 디코딩된 JSON 본문을 그대로 반환한다."""

        context = self._prepare_signed_request(method, path, params or {})
        headers = {"X-BX-APIKEY": self._require_api_key()}
        try:
            if context.method == "GET":
                response = await self._client.get(f"{context.endpoint}?{context.encoded}", headers=headers)
            else:
                headers["Content-Type"] = "application/x-www-form-urlencoded"
                response = await self._client.post(
                    context.endpoint,
                    content=context.encoded.encode(),
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            logger.error("bingx_request_failed", method=context.method, endpoint=context.endpoint, error=str(exc))
            raise BingXAPIError(f"BingX 요청 실패: {exc}", status_code=502) from exc
        payload = self._decode_response(context, response)
        logger.debug("bingx_response", method=context.method, endpoint=context.endpoint, payload=payload)
        return payload

    def _require_api_key(self) -> str:
        if not self._api_key:
            raise BingXCredentialsError()
        return self._api_key

    def _require_secret_key(self) -> str:
        if not self._secret_key:
            raise BingXCredentialsError()
        return self._secret_key

    def _prepare_signed_request(self, method: str, path: str, params: Mapping[str, Any]) -> _SignedRequestContext:
        method = method.upper()
        if method not in ("GET", "POST"):
            raise ValueError(f"지원하지 않는 HTTP 메서드: {method}")
        endpoint = self._normalize_endpoint(path)
        secret_key = self._require_secret_key()
        timestamp = self._timestamp_factory()
        full_params: Dict[str, Any] = {**params, "timestamp": timestamp}
        if method == "GET" and not params:
            # 추가 파라미터가 없는 GET 은 timestamp 만 서명한다.
            payload = canonical_query({"timestamp": timestamp})
        else:
            payload = canonical_query(full_params)
        return _SignedRequestContext(
            method=method,
            endpoint=endpoint,
            payload=payload,
            signature=sign_payload(payload, secret_key),
        )

    def _decode_response(self, context: _SignedRequestContext, response: httpx.Response) -> Any:
        if not response.is_success:
            payload = self._safe_json(response)
            detail = payload.get("msg") if isinstance(payload, Mapping) else None
            logger.error(
                "bingx_request_failed",
                method=context.method,
                endpoint=context.endpoint,
                status_code=response.status_code,
                payload=payload,
            )
            raise BingXAPIError(
                f"BingX API 오류[{response.status_code}]: {detail or payload or response.reason_phrase}",
                status_code=response.status_code,
                payload=payload,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise BingXAPIError(
                "BingX 응답을 JSON 으로 해석할 수 없습니다.",
                status_code=502,
                payload=response.text,
            ) from exc

    @staticmethod
    def _safe_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text or None

    @staticmethod
    def _normalize_endpoint(path: str) -> str:
        if not path:
            raise ValueError("엔드포인트 경로가 비어 있습니다.")
        return path if path.startswith("/") else f"/{path}"

    @staticmethod
    def _default_timestamp() -> int:
        return int(time.time() * 1000)


__all__ = [
    "BingXAPIError",
    "BingXClient",
    "BingXCredentialsError",
    "BingXError",
]
