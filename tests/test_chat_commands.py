from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.constants import MessageLimit, ParseMode

from bxbridge.chat.commands import TradingCommands, format_result, help_text
from bxbridge.clients.bingx import BingXAPIError
from bxbridge.data import OrderSide, PositionSide


def make_update() -> MagicMock:
    update = MagicMock()
    update.effective_message.reply_text = AsyncMock()
    return update


def make_context(*args: str) -> MagicMock:
    context = MagicMock()
    context.args = list(args)
    return context


def reply_of(update: MagicMock) -> tuple[str, dict]:
    update.effective_message.reply_text.assert_awaited_once()
    call = update.effective_message.reply_text.call_args
    return call.args[0], call.kwargs


@pytest.fixture
def client() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def bulk() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def commands(client: AsyncMock, bulk: AsyncMock) -> TradingCommands:
    return TradingCommands(client, bulk)


@pytest.mark.asyncio
async def test_balance_replies_with_formatted_json(commands: TradingCommands, client: AsyncMock) -> None:
    balance = {"code": 0, "data": {"balance": {"asset": "USDT", "balance": "10000"}}}
    client.get_account_balance.return_value = balance
    update = make_update()

    await commands.balance(update, make_context())

    text, kwargs = reply_of(update)
    assert text.startswith("Account Balance:")
    assert '"balance": "10000"' in text
    assert kwargs["parse_mode"] == ParseMode.MARKDOWN


@pytest.mark.asyncio
async def test_positions_and_orders(commands: TradingCommands, client: AsyncMock) -> None:
    client.get_open_positions.return_value = {"code": 0, "data": [{"symbol": "BTC-USDT", "positionSide": "LONG"}]}
    client.get_pending_orders.return_value = {"code": 0, "data": {"orders": []}}
    positions_update, orders_update = make_update(), make_update()

    await commands.positions(positions_update, make_context())
    await commands.orders(orders_update, make_context())

    assert reply_of(positions_update)[0].startswith("Open Positions:")
    assert reply_of(orders_update)[0].startswith("Pending Orders:")


@pytest.mark.asyncio
async def test_close_replies_position_closed(commands: TradingCommands, client: AsyncMock) -> None:
    client.close_position.return_value = {"code": 0}
    update = make_update()

    await commands.close(update, make_context("BTCUSDT", "LONG"))

    text, kwargs = reply_of(update)
    assert text.startswith("Position closed:")
    assert kwargs["parse_mode"] == ParseMode.MARKDOWN
    client.close_position.assert_awaited_once_with("BTCUSDT", PositionSide.LONG)


@pytest.mark.asyncio
async def test_close_rejects_unknown_position_side(commands: TradingCommands, client: AsyncMock) -> None:
    update = make_update()

    await commands.close(update, make_context("BTCUSDT", "SIDEWAYS"))

    assert reply_of(update)[0] == "Position side must be either LONG or SHORT"
    client.close_position.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_requires_arguments(commands: TradingCommands, client: AsyncMock) -> None:
    update = make_update()

    await commands.cancel(update, make_context("BTCUSDT"))

    assert reply_of(update)[0] == "Usage: /cancel <symbol> <orderId>"
    client.cancel_order.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_replies_order_canceled(commands: TradingCommands, client: AsyncMock) -> None:
    client.cancel_order.return_value = {"code": 0}
    update = make_update()

    await commands.cancel(update, make_context("BTCUSDT", "12345"))

    assert reply_of(update)[0].startswith("Order canceled:")
    client.cancel_order.assert_awaited_once_with("BTCUSDT", "12345")


@pytest.mark.asyncio
async def test_closeall_and_cancelall_delegate_to_bulk(commands: TradingCommands, bulk: AsyncMock) -> None:
    bulk.close_all_positions.return_value = [{"code": 0}]
    bulk.cancel_all_orders.return_value = []
    close_update, cancel_update = make_update(), make_update()

    await commands.close_all(close_update, make_context("BTCUSDT"))
    await commands.cancel_all(cancel_update, make_context())

    assert reply_of(close_update)[0].startswith("All positions closed:")
    assert reply_of(cancel_update)[0].startswith("All orders canceled:")
    bulk.close_all_positions.assert_awaited_once_with("BTCUSDT")
    bulk.cancel_all_orders.assert_awaited_once_with("")


@pytest.mark.asyncio
async def test_conditional_order_commands(commands: TradingCommands, client: AsyncMock) -> None:
    client.set_trailing_stop.return_value = {"code": 0}
    client.set_stop_loss.return_value = {"code": 0}
    client.set_take_profit.return_value = {"code": 0}
    trailing, stop, take = make_update(), make_update(), make_update()

    await commands.trailing_stop(trailing, make_context("BTCUSDT", "50000", "0.01"))
    await commands.stop_loss(stop, make_context("BTCUSDT", "49000"))
    await commands.take_profit(take, make_context("BTCUSDT", "51000"))

    assert reply_of(trailing)[0].startswith("Trailing stop set:")
    assert reply_of(stop)[0].startswith("Stop loss set:")
    assert reply_of(take)[0].startswith("Take profit set:")
    client.set_trailing_stop.assert_awaited_once_with("BTCUSDT", Decimal("50000"), Decimal("0.01"))
    client.set_stop_loss.assert_awaited_once_with("BTCUSDT", Decimal("49000"))
    client.set_take_profit.assert_awaited_once_with("BTCUSDT", Decimal("51000"))


@pytest.mark.asyncio
async def test_stop_loss_rejects_non_numeric_price(commands: TradingCommands, client: AsyncMock) -> None:
    update = make_update()

    await commands.stop_loss(update, make_context("BTCUSDT", "cheap"))

    assert reply_of(update)[0] == "Stop price must be a positive number"
    client.set_stop_loss.assert_not_awaited()


@pytest.mark.asyncio
async def test_market_places_order(commands: TradingCommands, client: AsyncMock) -> None:
    client.place_market_order.return_value = {"code": 0, "data": {"order": {"orderId": 1}}}
    update = make_update()

    await commands.market(update, make_context("BTCUSDT", "buy", "0.5"))

    assert reply_of(update)[0].startswith("Market order placed:")
    client.place_market_order.assert_awaited_once_with("BTCUSDT", OrderSide.BUY, Decimal("0.5"))


@pytest.mark.asyncio
async def test_market_rejects_non_numeric_quantity(commands: TradingCommands, client: AsyncMock) -> None:
    update = make_update()

    await commands.market(update, make_context("BTCUSDT", "BUY", "lots"))

    assert reply_of(update)[0] == "Quantity must be a positive number"
    client.place_market_order.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "args, expected",
    [
        ((), "Usage: /market <symbol> <BUY|SELL> <quantity>"),
        (("BTCUSDT", "HOLD", "1"), "Side must be either BUY or SELL"),
        (("BTCUSDT", "SELL", "-1"), "Quantity must be a positive number"),
        (("BTCUSDT", "SELL", "0"), "Quantity must be a positive number"),
    ],
)
async def test_market_validation(
    commands: TradingCommands, client: AsyncMock, args: tuple, expected: str
) -> None:
    update = make_update()

    await commands.market(update, make_context(*args))

    assert reply_of(update)[0] == expected
    client.place_market_order.assert_not_awaited()


@pytest.mark.asyncio
async def test_limit_places_order(commands: TradingCommands, client: AsyncMock) -> None:
    client.place_limit_order.return_value = {"code": 0}
    update = make_update()

    await commands.limit(update, make_context("BTCUSDT", "SELL", "1", "52000.5"))

    assert reply_of(update)[0].startswith("Limit order placed:")
    client.place_limit_order.assert_awaited_once_with("BTCUSDT", OrderSide.SELL, Decimal("1"), Decimal("52000.5"))


@pytest.mark.asyncio
async def test_exchange_failure_is_replied_not_raised(commands: TradingCommands, client: AsyncMock) -> None:
    client.get_account_balance.side_effect = BingXAPIError("BingX API 오류[400]: invalid_api_key", status_code=400)
    update = make_update()

    await commands.balance(update, make_context())

    text, kwargs = reply_of(update)
    assert text == "Error: BingX API 오류\\[400]: invalid\\_api\\_key"
    assert kwargs["parse_mode"] == ParseMode.MARKDOWN


@pytest.mark.asyncio
async def test_help_lists_every_command(commands: TradingCommands) -> None:
    update = make_update()

    await commands.help(update, make_context())

    text, _ = reply_of(update)
    for command in ("/balance", "/closeall", "/trailingstop", "/market", "/limit", "/help"):
        assert command in text
    assert "\\[symbol]" in text
    assert text.endswith("For more detailed information on each command, use it without parameters.")


def test_register_adds_all_command_handlers(commands: TradingCommands) -> None:
    application = MagicMock()

    commands.register(application)

    registered = {next(iter(call.args[0].commands)) for call in application.add_handler.call_args_list}
    assert registered == {
        "help",
        "start",
        "balance",
        "positions",
        "orders",
        "close",
        "cancel",
        "closeall",
        "cancelall",
        "trailingstop",
        "sl",
        "tp",
        "market",
        "limit",
    }


def test_format_result_wraps_json_in_code_block() -> None:
    assert format_result("Order canceled", {"orderId": 1}) == 'Order canceled:\n```\n{\n  "orderId": 1\n}\n```'
    assert help_text().startswith("Available Commands:")


@pytest.mark.asyncio
async def test_rejected_result_reply_falls_back_to_error_reply(commands: TradingCommands, client: AsyncMock) -> None:
    client.get_open_positions.return_value = {"code": 0, "data": []}
    update = make_update()
    update.effective_message.reply_text.side_effect = [RuntimeError("Message is too long"), None]

    await commands.positions(update, make_context())

    calls = update.effective_message.reply_text.call_args_list
    assert len(calls) == 2
    assert calls[0].args[0].startswith("Open Positions:")
    assert calls[1].args[0] == "Error: Message is too long"


@pytest.mark.asyncio
async def test_failed_error_reply_stays_inside_handler(commands: TradingCommands, client: AsyncMock) -> None:
    client.get_pending_orders.side_effect = BingXAPIError("BingX 요청 실패: timeout", status_code=502)
    update = make_update()
    update.effective_message.reply_text.side_effect = RuntimeError("Forbidden: bot was blocked by the user")

    await commands.orders(update, make_context())

    update.effective_message.reply_text.assert_awaited_once()


@pytest.mark.asyncio
async def test_large_result_is_trimmed_to_message_limit(commands: TradingCommands, client: AsyncMock) -> None:
    positions = [{"symbol": f"COIN{idx}-USDT", "positionSide": "LONG", "positionAmt": "1"} for idx in range(500)]
    client.get_open_positions.return_value = {"code": 0, "data": positions}
    update = make_update()

    await commands.positions(update, make_context())

    text, _ = reply_of(update)
    assert len(text) <= MessageLimit.MAX_TEXT_LENGTH
    assert text.startswith("Open Positions:\n```\n")
    assert text.endswith("\n... (truncated)\n```")


def test_format_result_respects_limit() -> None:
    text = format_result("Pending Orders", {"orders": ["x" * 50]}, limit=40)

    assert len(text) == 40
    assert text.endswith("... (truncated)\n```")
