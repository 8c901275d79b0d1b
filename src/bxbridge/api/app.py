"""FastAPI 거래 엔드포인트."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import Any, Dict

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..clients.bingx import BingXAPIError, BingXClient
from ..config.settings import AppSettings
from ..services.trading import TradingEngine

logger = structlog.get_logger(__name__)


@dataclass
class ApplicationContext:
    client: BingXClient
    engine: TradingEngine
    settings: AppSettings


def error_envelope(exc: BaseException, status_code: int, *, include_stack: bool) -> Dict[str, Any]:
    """모든 오류 응답이 공유하는 본문을 만든다."""

    message = getattr(exc, "message", None) or getattr(exc, "detail", None) or str(exc) or "Internal Server Error"
    body: Dict[str, Any] = {
        "status": "error",
        "statusCode": status_code,
        "message": str(message),
    }
    if include_stack:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def create_app(context: ApplicationContext) -> FastAPI:
    app = FastAPI(title="bxbridge", version="0.1.0")
    app.state.context = context
    include_stack = context.settings.is_development

    def get_context() -> ApplicationContext:
        return app.state.context

    def _respond(request: Request, exc: BaseException, status_code: int) -> JSONResponse:
        logger.error(
            "http_request_failed",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            error=str(exc),
            exc_info=exc if status_code >= 500 else None,
        )
        return JSONResponse(
            status_code=status_code,
            content=error_envelope(exc, status_code, include_stack=include_stack),
        )

    @app.exception_handler(BingXAPIError)
    async def _bingx_error(request: Request, exc: BingXAPIError) -> JSONResponse:
        return _respond(request, exc, exc.status_code or 500)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _respond(request, exc, exc.status_code)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        return _respond(request, exc, 500)

    @app.get("/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/balance")
    async def balance(ctx: ApplicationContext = Depends(get_context)) -> Any:
        return await ctx.client.get_account_balance()

    @app.get("/positions")
    async def positions(ctx: ApplicationContext = Depends(get_context)) -> Any:
        return await ctx.client.get_open_positions()

    @app.get("/price/{symbol}")
    async def price(symbol: str, ctx: ApplicationContext = Depends(get_context)) -> Any:
        return await ctx.client.get_price(symbol)

    @app.post("/trade/{symbol}")
    async def trade(symbol: str, ctx: ApplicationContext = Depends(get_context)) -> Any:
        return await ctx.engine.run_cycle(symbol)

    return app


__all__ = ["ApplicationContext", "create_app", "error_envelope"]
