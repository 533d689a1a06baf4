"""
타임존 유틸리티

내부 저장: UTC | 외부 표시: IST 원칙 준수를 위한 헬퍼 함수
원장 날짜 파싱(엄격한 YYYY-MM-DD, ISO 8601, SQLite 타임스탬프) 포함
"""

import re
from datetime import datetime, timezone, timedelta

# IST 타임존 (UTC+5:30)
IST = timezone(timedelta(hours=5, minutes=30))

# 거래일 필드용 엄격한 날짜 형식
STRICT_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_ist(dt: datetime) -> datetime:
    """UTC datetime을 IST로 변환

    Args:
        dt: datetime 객체 (UTC 권장, naive면 UTC로 간주)

    Returns:
        IST 타임존의 datetime
    """
    if dt.tzinfo is None:
        # naive datetime은 UTC로 간주
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(IST)


def format_ist(dt: datetime, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    """UTC datetime을 IST 문자열로 포맷

    Example:
        >>> format_ist(datetime(2026, 2, 20, 16, 0, tzinfo=timezone.utc))
        '2026-02-20 21:30:00'
    """
    return to_ist(dt).strftime(fmt)


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.
    """
    return datetime.now(timezone.utc)


def parse_strict_date(value: object) -> datetime | None:
    """엄격한 YYYY-MM-DD 날짜 파싱

    Args:
        value: 파싱할 값 (문자열이 아니면 None)

    Returns:
        해당 날짜 00:00 UTC, 형식 불일치 또는 존재하지 않는 날짜면 None

    Example:
        >>> parse_strict_date("2026-03-01")
        datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)
        >>> parse_strict_date("01/03/2026") is None
        True
    """
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not STRICT_DATE_PATTERN.match(text):
        return None

    try:
        return datetime.strptime(text, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_timestamp(value: object) -> datetime | None:
    """타임스탬프 파싱 (실패 시 None)

    허용 형식:
    - datetime 객체
    - ISO 8601 문자열 ("2026-03-01T10:00:00Z", "2026-03-01T10:00:00+05:30")
    - SQLite CURRENT_TIMESTAMP 문자열 ("2026-03-01 10:00:00", UTC로 간주)
    - 날짜만 있는 문자열 ("2026-03-01")

    naive 값은 UTC로 간주.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
