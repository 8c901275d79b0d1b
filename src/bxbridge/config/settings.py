"""애플리케이션 설정 로더."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Optional

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """환경 변수 기반 프로젝트 설정."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    bingx_base_url: HttpUrl = Field(
        default="https://open-api.bingx.com",
        description="BingX Open API 기본 URL",
    )
    bingx_api_key: Optional[str] = Field(
        default=None,
        description="BingX API Key (X-BX-APIKEY 헤더로 전송)",
    )
    bingx_secret_key: Optional[str] = Field(
        default=None,
        description="BingX Secret Key (서명 키로만 사용)",
        repr=False,
    )
    http_timeout: Optional[float] = Field(
        default=None,
        description="HTTP 요청 타임아웃(초). 비워두면 무제한",
        gt=0,
    )
    telegram_bot_token: Optional[str] = Field(
        default=None,
        description="텔레그램 봇 토큰. 없으면 채팅 명령 인터페이스를 띄우지 않는다",
        repr=False,
    )
    app_env: str = Field(
        default="production",
        description="실행 환경. development 이면 오류 응답에 스택을 포함한다",
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="HTTP 서버 호스트",
    )
    api_port: int = Field(
        default=3000,
        description="HTTP 서버 포트",
        ge=1,
        le=65535,
    )
    log_level: str = Field(
        default="INFO",
        description="로그 레벨",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="전체 로그를 기록할 파일 경로 (선택)",
    )
    error_log_file: Optional[str] = Field(
        default=None,
        description="error 이상 로그만 기록할 파일 경로 (선택)",
    )
    service_name: str = Field(
        default="bxbridge",
        description="로그 이벤트에 붙는 서비스 이름",
    )
    trade_quantity: Decimal = Field(
        default=Decimal("0.01"),
        description="가격 변동 트리거가 내는 고정 시장가 주문 수량",
        gt=Decimal("0"),
    )
    trade_kline_interval: str = Field(
        default="1m",
        description="가격 변동 트리거가 비교에 사용할 캔들 간격",
    )
    clock_skew_tolerance_ms: int = Field(
        default=1000,
        description="서버 시간과의 허용 오차(ms). 초과하면 경고만 남긴다",
        ge=0,
    )

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """싱글턴 형태로 설정을 반환한다."""

    return AppSettings()


__all__ = ["AppSettings", "get_settings"]
