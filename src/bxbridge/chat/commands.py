"""텔레그램 채팅 명령 인터페이스."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Awaitable, Callable, List, Sequence, Tuple

import structlog
from telegram import Update
from telegram.constants import MessageLimit, ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.helpers import escape_markdown

from ..clients.bingx import BingXClient
from ..data import OrderSide, PositionSide, to_decimal
from ..services.bulk import BulkExecutor

logger = structlog.get_logger(__name__)

HELP_COMMANDS: Tuple[Tuple[str, str], ...] = (
    ("/balance", "Get account balance"),
    ("/positions", "Get open positions"),
    ("/orders", "Get pending orders"),
    ("/close <symbol> <LONG|SHORT>", "Close a specific position"),
    ("/cancel <symbol> <orderId>", "Cancel a specific order"),
    ("/closeall [symbol]", "Close all positions (optionally for a specific symbol)"),
    ("/cancelall [symbol]", "Cancel all orders (optionally for a specific symbol)"),
    ("/trailingstop <symbol> <activationPrice> <callbackRate>", "Set a trailing stop"),
    ("/sl <symbol> <stopPrice>", "Set a stop loss"),
    ("/tp <symbol> <stopPrice>", "Set a take profit"),
    ("/market <symbol> <BUY|SELL> <quantity>", "Place a market order"),
    ("/limit <symbol> <BUY|SELL> <quantity> <price>", "Place a limit order"),
    ("/help", "Show this help message"),
)


TRUNCATED_MARKER = "\n... (truncated)"


class CommandValidationError(ValueError):
    """명령 인자가 누락되었거나 형식이 잘못되었을 때 발생."""


def format_result(title: str, result: Any, *, limit: int = int(MessageLimit.MAX_TEXT_LENGTH)) -> str:
    """결과를 제목과 들여쓰기된 JSON 코드 블록으로 렌더링한다.

    텔레그램 메시지 길이 제한을 넘으면 코드 블록이 닫히도록 본문만 잘라낸다.
    """

    body = json.dumps(result, indent=2, ensure_ascii=False, default=str)
    text = f"{title}:\n```\n{body}\n```"
    if len(text) <= limit:
        return text
    overhead = len(text) - len(body) + len(TRUNCATED_MARKER)
    return f"{title}:\n```\n{body[: max(limit - overhead, 0)]}{TRUNCATED_MARKER}\n```"


def help_text() -> str:
    lines = ["Available Commands:", ""]
    lines.extend(f"{command} - {description}" for command, description in HELP_COMMANDS)
    lines.append("")
    lines.append("For more detailed information on each command, use it without parameters.")
    return "\n".join(lines)


def require_args(args: Sequence[str], count: int, usage: str) -> List[str]:
    if len(args) < count or not all(args[:count]):
        raise CommandValidationError(f"Usage: {usage}")
    return list(args[:count])


def parse_order_side(value: str) -> OrderSide:
    try:
        return OrderSide(value.upper())
    except ValueError as exc:
        raise CommandValidationError("Side must be either BUY or SELL") from exc


def parse_position_side(value: str) -> PositionSide:
    try:
        return PositionSide(value.upper())
    except ValueError as exc:
        raise CommandValidationError("Position side must be either LONG or SHORT") from exc


def parse_positive_number(value: str, label: str) -> Decimal:
    try:
        number = to_decimal(value)
    except (TypeError, ValueError) as exc:
        raise CommandValidationError(f"{label} must be a positive number") from exc
    if not number.is_finite() or number <= Decimal("0"):
        raise CommandValidationError(f"{label} must be a positive number")
    return number


class TradingCommands:
    """채팅 명령을 검증한 뒤 거래소 연산으로 연결한다.

    모든 실패는 이 계층에서 잡아 채팅 응답으로 돌려준다.
    """

    def __init__(self, client: BingXClient, bulk: BulkExecutor) -> None:
        self._client = client
        self._bulk = bulk

    def register(self, application: Application) -> None:
        handlers = {
            "help": self.help,
            "start": self.help,
            "balance": self.balance,
            "positions": self.positions,
            "orders": self.orders,
            "close": self.close,
            "cancel": self.cancel,
            "closeall": self.close_all,
            "cancelall": self.cancel_all,
            "trailingstop": self.trailing_stop,
            "sl": self.stop_loss,
            "tp": self.take_profit,
            "market": self.market,
            "limit": self.limit,
        }
        for command, callback in handlers.items():
            application.add_handler(CommandHandler(command, callback))

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._reply(update, escape_markdown(help_text(), version=1))

    async def balance(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._execute(update, "balance", "Account Balance", self._client.get_account_balance)

    async def positions(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._execute(update, "positions", "Open Positions", self._client.get_open_positions)

    async def orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await self._execute(update, "orders", "Pending Orders", self._client.get_pending_orders)

    async def close(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, side = require_args(self._args(context), 2, "/close <symbol> <LONG|SHORT>")
            position_side = parse_position_side(side)
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(
            update, "close", "Position closed", lambda: self._client.close_position(symbol, position_side)
        )

    async def cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, order_id = require_args(self._args(context), 2, "/cancel <symbol> <orderId>")
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(update, "cancel", "Order canceled", lambda: self._client.cancel_order(symbol, order_id))

    async def close_all(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        symbol = self._optional_symbol(context)
        await self._execute(
            update, "closeall", "All positions closed", lambda: self._bulk.close_all_positions(symbol)
        )

    async def cancel_all(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        symbol = self._optional_symbol(context)
        await self._execute(update, "cancelall", "All orders canceled", lambda: self._bulk.cancel_all_orders(symbol))

    async def trailing_stop(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, activation, callback = require_args(
                self._args(context), 3, "/trailingstop <symbol> <activationPrice> <callbackRate>"
            )
            activation_price = parse_positive_number(activation, "Activation price")
            callback_rate = parse_positive_number(callback, "Callback rate")
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(
            update,
            "trailingstop",
            "Trailing stop set",
            lambda: self._client.set_trailing_stop(symbol, activation_price, callback_rate),
        )

    async def stop_loss(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, raw_price = require_args(self._args(context), 2, "/sl <symbol> <stopPrice>")
            stop_price = parse_positive_number(raw_price, "Stop price")
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(update, "sl", "Stop loss set", lambda: self._client.set_stop_loss(symbol, stop_price))

    async def take_profit(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, raw_price = require_args(self._args(context), 2, "/tp <symbol> <stopPrice>")
            stop_price = parse_positive_number(raw_price, "Stop price")
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(update, "tp", "Take profit set", lambda: self._client.set_take_profit(symbol, stop_price))

    async def market(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, raw_side, raw_quantity = require_args(
                self._args(context), 3, "/market <symbol> <BUY|SELL> <quantity>"
            )
            side = parse_order_side(raw_side)
            quantity = parse_positive_number(raw_quantity, "Quantity")
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(
            update,
            "market",
            "Market order placed",
            lambda: self._client.place_market_order(symbol, side, quantity),
        )

    async def limit(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            symbol, raw_side, raw_quantity, raw_price = require_args(
                self._args(context), 4, "/limit <symbol> <BUY|SELL> <quantity> <price>"
            )
            side = parse_order_side(raw_side)
            quantity = parse_positive_number(raw_quantity, "Quantity")
            price = parse_positive_number(raw_price, "Price")
        except CommandValidationError as exc:
            await self._reply_invalid(update, exc)
            return
        await self._execute(
            update,
            "limit",
            "Limit order placed",
            lambda: self._client.place_limit_order(symbol, side, quantity, price),
        )

    async def _execute(
        self,
        update: Update,
        command: str,
        title: str,
        call: Callable[[], Awaitable[Any]],
    ) -> None:
        logger.info("chat_command_received", command=command)
        try:
            result = await call()
            await self._send(update, format_result(title, result))
        except Exception as exc:
            logger.error("chat_command_failed", command=command, error=str(exc), exc_info=True)
            await self._reply(update, f"Error: {escape_markdown(str(exc), version=1)}")

    async def _reply_invalid(self, update: Update, exc: CommandValidationError) -> None:
        await self._reply(update, escape_markdown(str(exc), version=1))

    async def _reply(self, update: Update, text: str) -> None:
        """응답 전송 실패는 기록만 하고 핸들러 밖으로 내보내지 않는다."""

        try:
            await self._send(update, text)
        except Exception as exc:
            logger.error("chat_reply_failed", error=str(exc), exc_info=True)

    @staticmethod
    async def _send(update: Update, text: str) -> None:
        message = update.effective_message
        if message is None:
            return
        await message.reply_text(text, parse_mode=ParseMode.MARKDOWN)

    @staticmethod
    def _args(context: ContextTypes.DEFAULT_TYPE) -> List[str]:
        return list(context.args or [])

    @staticmethod
    def _optional_symbol(context: ContextTypes.DEFAULT_TYPE) -> str:
        args = context.args or []
        return args[0] if args else ""


def build_bot(token: str, commands: TradingCommands) -> Application:
    """명령 핸들러가 등록된 텔레그램 Application 을 만든다."""

    application = Application.builder().token(token).build()
    commands.register(application)
    return application


__all__ = [
    "CommandValidationError",
    "HELP_COMMANDS",
    "TradingCommands",
    "build_bot",
    "format_result",
    "help_text",
    "parse_order_side",
    "parse_position_side",
    "parse_positive_number",
    "require_args",
]
