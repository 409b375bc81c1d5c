"""
유틸리티 패키지

금액 변환, 타임존 처리 등 공통 유틸리티
"""

from core.utils.money import from_minor, parse_amount, to_minor
from core.utils.timezone import (
    DB_TS_FORMAT,
    format_db_ts,
    now_utc,
    parse_db_ts,
    to_utc,
)

__all__ = [
    "from_minor",
    "parse_amount",
    "to_minor",
    "DB_TS_FORMAT",
    "format_db_ts",
    "now_utc",
    "parse_db_ts",
    "to_utc",
]
