"""
조회 기간 토큰 파싱

all | week | month | year | YYYY-MM
"""

from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from core.errors import ValidationError
from core.utils.timezone import to_utc

PERIOD_ALL = "all"
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"
PERIOD_YEAR = "year"

_MONTH_TOKEN = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True)
class PeriodWindow:
    """조회 구간 (start ≤ t ≤ end, UTC)"""

    start: datetime
    end: datetime


def month_window(year: int, month: int) -> PeriodWindow:
    """해당 월의 [1일 00:00:00, 말일 23:59:59] 구간

    Raises:
        ValidationError: 잘못된 연/월
    """
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        raise ValidationError(f"Invalid month: {year:04d}-{month:02d}")

    last_day = calendar.monthrange(year, month)[1]
    return PeriodWindow(
        start=datetime(year, month, 1, tzinfo=timezone.utc),
        end=datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc),
    )


def parse_period(token: str, now: datetime) -> PeriodWindow | None:
    """기간 토큰 → 조회 구간

    - week: 현재 시각 기준 최근 7일
    - month / year: 이번 달 / 올해 시작부터 현재까지
    - YYYY-MM: 해당 월 전체

    Args:
        token: 기간 토큰
        now: 기준 시각

    Returns:
        조회 구간 (all이면 None)

    Raises:
        ValidationError: 알 수 없는 토큰
    """
    token = (token or "").strip().lower()
    now = to_utc(now)

    if token == PERIOD_ALL:
        return None
    if token == PERIOD_WEEK:
        return PeriodWindow(start=now - timedelta(days=7), end=now)
    if token == PERIOD_MONTH:
        return PeriodWindow(start=now.replace(day=1, hour=0, minute=0, second=0), end=now)
    if token == PERIOD_YEAR:
        return PeriodWindow(
            start=now.replace(month=1, day=1, hour=0, minute=0, second=0),
            end=now,
        )

    match = _MONTH_TOKEN.match(token)
    if match is None:
        raise ValidationError(
            f"Invalid period: {token!r} (expected all, week, month, year or YYYY-MM)"
        )
    return month_window(int(match.group(1)), int(match.group(2)))
