"""``python -m bxbridge`` 진입점."""

from __future__ import annotations

import structlog
import uvicorn

from .config.settings import get_settings
from .runtime.bootstrap import build_application
from .runtime.hooks import install_process_hooks
from .runtime.log_config import setup_logging


def main() -> None:
    settings = get_settings()
    setup_logging(
        settings.log_level,
        service=settings.service_name,
        log_file=settings.log_file,
        error_log_file=settings.error_log_file,
    )
    install_process_hooks()
    app = build_application(settings)
    structlog.get_logger(__name__).info("server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    main()
