"""BingX 요청 서명 유틸리티."""

from __future__ import annotations

import hashlib
import hmac
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from urllib.parse import quote

# encodeURIComponent 가 인코딩하지 않는 문자 집합
_URI_COMPONENT_SAFE = "-_.!~*'()"


def stringify(value: Any) -> str:
    """파라미터 값을 거래소가 기대하는 문자열 표현으로 바꾼다."""

    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def canonical_query(params: Mapping[str, Any]) -> str:
    """키 오름차순 ``key=value`` 를 ``&`` 로 이은 정규 문자열을 만든다.

    빈 문자열과 ``None`` 값은 제외되며, 값은 퍼센트 인코딩된다. 이 문자열이
    그대로 HMAC 입력이자 전송 바이트가 된다.
    """

    pairs = []
    for key in sorted(params):
        value = params[key]
        if value is None or (isinstance(value, str) and value == ""):
            continue
        pairs.append(f"{key}={quote(stringify(value), safe=_URI_COMPONENT_SAFE)}")
    return "&".join(pairs)


def sign_payload(payload: str, secret_key: str) -> str:
    return hmac.new(secret_key.encode(), payload.encode(), hashlib.sha256).hexdigest()


def generate_signature(params: Mapping[str, Any], secret_key: str) -> str:
    """파라미터 매핑에 대한 소문자 16진수 HMAC-SHA256 서명을 반환한다."""

    return sign_payload(canonical_query(params), secret_key)


__all__ = ["canonical_query", "generate_signature", "sign_payload", "stringify"]
