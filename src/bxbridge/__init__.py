"""BingX 무기한 선물 API 를 HTTP 와 텔레그램 명령으로 노출하는 패키지."""

from .api.app import ApplicationContext, create_app  # noqa: F401
from .chat.commands import TradingCommands  # noqa: F401
from .clients.bingx import (  # noqa: F401
    BingXAPIError,
    BingXClient,
    BingXCredentialsError,
    BingXError,
)
from .clients.signing import canonical_query, generate_signature  # noqa: F401
from .config.settings import AppSettings, get_settings  # noqa: F401
from .data import (  # noqa: F401
    Candle,
    OrderSide,
    OrderType,
    PositionSide,
    SignalAction,
    StrategySignal,
)
from .runtime.bootstrap import build_application  # noqa: F401
from .runtime.log_config import setup_logging  # noqa: F401
from .services.bulk import BulkExecutor  # noqa: F401
from .services.trading import TradingEngine  # noqa: F401
from .strategies.price_movement import PriceMovementStrategy  # noqa: F401

__all__ = [
    "AppSettings",
    "ApplicationContext",
    "BingXAPIError",
    "BingXClient",
    "BingXCredentialsError",
    "BingXError",
    "BulkExecutor",
    "Candle",
    "OrderSide",
    "OrderType",
    "PositionSide",
    "PriceMovementStrategy",
    "SignalAction",
    "StrategySignal",
    "TradingCommands",
    "TradingEngine",
    "build_application",
    "canonical_query",
    "create_app",
    "generate_signature",
    "get_settings",
    "setup_logging",
]
