"""
타임존 유틸리티

내부 저장: UTC 원칙 준수를 위한 헬퍼 함수.
DB에는 'YYYY-MM-DD HH:MM:SS' (UTC) 문자열로 저장하여 문자열 비교로 정렬/범위 조회.
"""

from datetime import date, datetime, timezone

# DB 저장 포맷 (고정 길이, 사전순 = 시간순)
DB_TS_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_utc() -> datetime:
    """현재 UTC 시간 반환 (타임존 명시)

    datetime.now(timezone.utc)의 축약형.

    Returns:
        현재 UTC 시간 (tzinfo=timezone.utc)
    """
    return datetime.now(timezone.utc)


def to_utc(value: date | datetime) -> datetime:
    """date/datetime을 UTC datetime으로 정규화

    - date: 해당 일자 00:00 UTC
    - naive datetime: UTC로 간주
    - aware datetime: UTC로 변환

    Args:
        value: 변환할 값

    Returns:
        UTC datetime (마이크로초 제거)
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        else:
            value = value.astimezone(timezone.utc)
    else:
        value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value.replace(microsecond=0)


def format_db_ts(value: date | datetime) -> str:
    """DB 저장용 문자열로 포맷

    Example:
        >>> format_db_ts(date(2025, 1, 10))
        '2025-01-10 00:00:00'
    """
    return to_utc(value).strftime(DB_TS_FORMAT)


def parse_db_ts(value: str) -> datetime:
    """DB 문자열을 UTC datetime으로 변환"""
    return datetime.strptime(value, DB_TS_FORMAT).replace(tzinfo=timezone.utc)
