"""프로세스 수준 예외 훅."""

from __future__ import annotations

import asyncio
import sys
from types import TracebackType
from typing import Any, Dict, Optional, Type

import structlog

logger = structlog.get_logger(__name__)


def handle_uncaught_exception(
    exc_type: Type[BaseException],
    exc_value: BaseException,
    exc_traceback: Optional[TracebackType],
) -> None:
    """잡히지 않은 동기 예외를 기록한다.

    이 훅이 불린 뒤 인터프리터는 종료 코드 1 로 끝난다.
    """

    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    logger.critical("uncaught_exception", exc_info=(exc_type, exc_value, exc_traceback))


def handle_loop_exception(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    """처리되지 않은 비동기 예외는 기록만 하고 계속 동작한다."""

    exception = context.get("exception")
    message = context.get("message", "unhandled asyncio exception")
    if exception is not None:
        logger.error(
            "unhandled_async_exception",
            message=message,
            exc_info=(type(exception), exception, exception.__traceback__),
        )
    else:
        logger.error("unhandled_async_exception", message=message)


def install_process_hooks() -> None:
    sys.excepthook = handle_uncaught_exception


def install_loop_hooks(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    (loop or asyncio.get_running_loop()).set_exception_handler(handle_loop_exception)


__all__ = [
    "handle_loop_exception",
    "handle_uncaught_exception",
    "install_loop_hooks",
    "install_process_hooks",
]
