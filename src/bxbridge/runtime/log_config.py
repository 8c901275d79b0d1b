"""structlog 기반 구조화 로깅 설정."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog


def setup_logging(
    level: str = "INFO",
    *,
    service: str = "bxbridge",
    log_file: Optional[str] = None,
    error_log_file: Optional[str] = None,
) -> structlog.stdlib.BoundLogger:
    """표준 logging 위에 JSON 렌더링 structlog 를 구성한다.

    모든 이벤트에 ``service`` 필드가 붙고, 파일 경로가 주어지면 전체 로그와
    error 이상 로그를 각각 파일에도 남긴다.
    """

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    if error_log_file:
        error_handler = logging.FileHandler(error_log_file, encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)
    logging.basicConfig(
        format="%(message)s",
        level=level.upper(),
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service)
    return structlog.get_logger()


__all__ = ["setup_logging"]
