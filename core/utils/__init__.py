"""
유틸리티 패키지

identity/dedup key 생성, 타임존 처리 등 공통 유틸리티
"""

from core.utils.timezone import (
    IST,
    to_ist,
    format_ist,
    now_utc,
    parse_strict_date,
    parse_timestamp,
)

__all__ = [
    "IST",
    "to_ist",
    "format_ist",
    "now_utc",
    "parse_strict_date",
    "parse_timestamp",
]
