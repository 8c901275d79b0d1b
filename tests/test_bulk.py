from typing import Any, List, Optional

import httpx
import pytest
import respx

from bxbridge.clients.bingx import BingXAPIError, BingXClient
from bxbridge.config.settings import AppSettings
from bxbridge.services.bulk import BulkExecutor


class FakeBingXClient:
    def __init__(
        self,
        *,
        positions: Any = None,
        orders: Any = None,
        fail_symbol: Optional[str] = None,
    ) -> None:
        self._positions = positions
        self._orders = orders
        self._fail_symbol = fail_symbol
        self.closed: List[tuple[str, str]] = []
        self.canceled: List[tuple[str, str]] = []

    async def get_open_positions(self) -> Any:
        return {"code": 0, "data": self._positions}

    async def get_pending_orders(self) -> Any:
        return {"code": 0, "data": self._orders}

    async def close_position(self, symbol: str, position_side: str) -> Any:
        if symbol == self._fail_symbol:
            raise BingXAPIError("position rejected", status_code=400)
        self.closed.append((symbol, position_side))
        return {"code": 0, "data": {"symbol": symbol, "positionSide": position_side}}

    async def cancel_order(self, symbol: str, order_id: str) -> Any:
        if symbol == self._fail_symbol:
            raise BingXAPIError("order rejected", status_code=400)
        self.canceled.append((symbol, order_id))
        return {"code": 0, "data": {"orderId": order_id}}


POSITIONS = [
    {"symbol": "BTC-USDT", "positionSide": "LONG", "positionAmt": "0.1"},
    {"symbol": "ETH-USDT", "positionSide": "SHORT", "positionAmt": "2"},
    {"symbol": "BTC-USDT", "positionSide": "SHORT", "positionAmt": "0.2"},
    {"symbol": "BTC-USDT-X", "positionSide": "LONG", "positionAmt": "1"},
]


@pytest.mark.asyncio
async def test_close_all_positions_filters_by_exact_symbol() -> None:
    client = FakeBingXClient(positions=POSITIONS)
    bulk = BulkExecutor(client)

    results = await bulk.close_all_positions("BTC-USDT")

    assert sorted(client.closed) == [("BTC-USDT", "LONG"), ("BTC-USDT", "SHORT")]
    assert len(results) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("symbol", [None, ""])
async def test_close_all_positions_without_symbol_closes_everything(symbol: Optional[str]) -> None:
    client = FakeBingXClient(positions=POSITIONS)
    bulk = BulkExecutor(client)

    results = await bulk.close_all_positions(symbol)

    assert len(client.closed) == len(POSITIONS)
    assert [result["data"]["symbol"] for result in results] == [entry["symbol"] for entry in POSITIONS]


@pytest.mark.asyncio
async def test_close_all_positions_fails_when_any_close_fails() -> None:
    client = FakeBingXClient(positions=POSITIONS, fail_symbol="ETH-USDT")
    bulk = BulkExecutor(client)

    with pytest.raises(BingXAPIError, match="position rejected"):
        await bulk.close_all_positions()


@pytest.mark.asyncio
async def test_cancel_all_orders_filters_by_symbol() -> None:
    orders = [
        {"symbol": "BTC-USDT", "orderId": "1"},
        {"symbol": "ETH-USDT", "orderId": "2"},
        {"symbol": "BTC-USDT", "orderId": "3"},
    ]
    client = FakeBingXClient(orders=orders)
    bulk = BulkExecutor(client)

    results = await bulk.cancel_all_orders("ETH-USDT")

    assert client.canceled == [("ETH-USDT", "2")]
    assert results == [{"code": 0, "data": {"orderId": "2"}}]


@pytest.mark.asyncio
async def test_cancel_all_orders_accepts_nested_order_list() -> None:
    client = FakeBingXClient(orders={"orders": [{"symbol": "BTC-USDT", "orderId": "9"}]})
    bulk = BulkExecutor(client)

    await bulk.cancel_all_orders()

    assert client.canceled == [("BTC-USDT", "9")]


@pytest.mark.asyncio
async def test_empty_list_dispatches_nothing() -> None:
    client = FakeBingXClient(positions=[])
    bulk = BulkExecutor(client)

    assert await bulk.close_all_positions() == []
    assert client.closed == []


@pytest.mark.asyncio
async def test_unexpected_list_shape_raises() -> None:
    client = FakeBingXClient(positions="not-a-list")
    bulk = BulkExecutor(client)

    with pytest.raises(BingXAPIError):
        await bulk.close_all_positions()


@pytest.mark.asyncio
async def test_close_all_sends_exchange_position_side_unchanged(respx_mock: respx.MockRouter) -> None:
    base_url = "https://open-api.bingx.com/openApi/swap/v2"
    respx_mock.get(f"{base_url}/user/positions").mock(
        return_value=httpx.Response(
            200,
            json={
                "code": 0,
                "data": [
                    {"symbol": "BTC-USDT", "positionSide": "BOTH"},
                    {"symbol": "ETH-USDT", "positionSide": "SHORT"},
                ],
            },
        )
    )
    close_route = respx_mock.post(f"{base_url}/trade/closePosition").mock(
        return_value=httpx.Response(200, json={"code": 0})
    )
    settings = AppSettings(bingx_api_key="key", bingx_secret_key="secret")

    async with BingXClient(settings=settings, timestamp_factory=lambda: 1) as client:
        results = await BulkExecutor(client).close_all_positions()

    assert results == [{"code": 0}, {"code": 0}]
    bodies = [call.request.content.decode() for call in close_route.calls]
    assert bodies[0].startswith("positionSide=BOTH&symbol=BTC-USDT&timestamp=1&signature=")
    assert bodies[1].startswith("positionSide=SHORT&symbol=ETH-USDT&timestamp=1&signature=")
