"""포지션 일괄 청산과 주문 일괄 취소."""

from __future__ import annotations

import asyncio
from typing import Any, List, Mapping, Optional, Sequence

import structlog

from ..clients.bingx import BingXAPIError, BingXClient

logger = structlog.get_logger(__name__)


class BulkExecutor:
    """목록을 조회한 뒤 항목별 청산/취소 요청을 동시에 보낸다.

    개별 호출 중 하나라도 실패하면 전체가 실패한다. 부분 성공 결과는
    돌려주지 않으며 재시도하지 않는다.
    """

    def __init__(self, client: BingXClient) -> None:
        self._client = client

    async def close_all_positions(self, symbol: Optional[str] = None) -> List[Any]:
        payload = await self._client.get_open_positions()
        positions = self._filter(self._extract_entries(payload, "positions"), symbol)
        logger.info("close_all_positions", symbol=symbol or None, count=len(positions))
        return await asyncio.gather(
            *(self._client.close_position(entry["symbol"], entry["positionSide"]) for entry in positions)
        )

    async def cancel_all_orders(self, symbol: Optional[str] = None) -> List[Any]:
        payload = await self._client.get_pending_orders()
        orders = self._filter(self._extract_entries(payload, "orders"), symbol)
        logger.info("cancel_all_orders", symbol=symbol or None, count=len(orders))
        return await asyncio.gather(
            *(self._client.cancel_order(entry["symbol"], entry["orderId"]) for entry in orders)
        )

    @staticmethod
    def _filter(entries: Sequence[Mapping[str, Any]], symbol: Optional[str]) -> List[Mapping[str, Any]]:
        if not symbol:
            return list(entries)
        return [entry for entry in entries if entry.get("symbol") == symbol]

    @staticmethod
    def _extract_entries(payload: Any, key: str) -> List[Mapping[str, Any]]:
        data = payload.get("data") if isinstance(payload, Mapping) else None
        if isinstance(data, Mapping):
            data = data.get(key)
        if not isinstance(data, list) or not all(isinstance(entry, Mapping) for entry in data):
            raise BingXAPIError(f"{key} 목록 형식이 올바르지 않습니다.", payload=payload)
        return data


__all__ = ["BulkExecutor"]
