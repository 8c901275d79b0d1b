"""런타임 구성과 FastAPI 애플리케이션 부트스트랩."""

from __future__ import annotations

import asyncio
from typing import Optional

import structlog
from fastapi import FastAPI

from ..api.app import ApplicationContext, create_app
from ..chat.commands import TradingCommands, build_bot
from ..clients.bingx import BingXClient
from ..config.settings import AppSettings, get_settings
from ..services.bulk import BulkExecutor
from ..services.trading import TradingEngine
from .hooks import install_loop_hooks

logger = structlog.get_logger(__name__)


def build_application(settings: Optional[AppSettings] = None) -> FastAPI:
    settings = settings or get_settings()
    client = BingXClient(settings=settings)
    engine = TradingEngine(
        client=client,
        quantity=settings.trade_quantity,
        candle_interval=settings.trade_kline_interval,
    )
    context = ApplicationContext(client=client, engine=engine, settings=settings)
    app = create_app(context)

    @app.on_event("startup")
    async def _start_runtime() -> None:  # pragma: no cover - FastAPI 훅
        install_loop_hooks()
        # 서버 시간 확인은 기동을 막지 않는다.
        app.state.clock_check = asyncio.create_task(client.check_server_time())

    if settings.telegram_bot_token:
        bot = build_bot(settings.telegram_bot_token, TradingCommands(client, BulkExecutor(client)))
        app.state.bot = bot

        @app.on_event("startup")
        async def _start_bot() -> None:  # pragma: no cover - FastAPI 훅
            await bot.initialize()
            await bot.start()
            await bot.updater.start_polling()
            logger.info("telegram_bot_started")

        @app.on_event("shutdown")
        async def _stop_bot() -> None:  # pragma: no cover - FastAPI 훅
            await bot.updater.stop()
            await bot.stop()
            await bot.shutdown()
            logger.info("telegram_bot_stopped")
    else:
        logger.warning("telegram_bot_disabled", reason="TELEGRAM_BOT_TOKEN 미설정")

    @app.on_event("shutdown")
    async def _close_client() -> None:  # pragma: no cover - FastAPI 훅
        await client.aclose()

    return app


__all__ = ["build_application"]
