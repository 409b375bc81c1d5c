"""
core/utils/timezone.py 테스트
"""

from datetime import date, datetime, timedelta, timezone

from core.utils.timezone import format_db_ts, now_utc, parse_db_ts, to_utc


class TestToUtc:
    """to_utc 테스트"""

    def test_date_is_midnight_utc(self) -> None:
        result = to_utc(date(2025, 1, 10))

        assert result == datetime(2025, 1, 10, tzinfo=timezone.utc)

    def test_naive_datetime_taken_as_utc(self) -> None:
        result = to_utc(datetime(2025, 1, 10, 15, 30))

        assert result.tzinfo == timezone.utc
        assert result.hour == 15

    def test_aware_datetime_converted(self) -> None:
        kst = timezone(timedelta(hours=9))
        result = to_utc(datetime(2025, 1, 10, 9, 0, tzinfo=kst))

        assert result == datetime(2025, 1, 10, 0, 0, tzinfo=timezone.utc)

    def test_microseconds_dropped(self) -> None:
        result = to_utc(datetime(2025, 1, 10, 1, 2, 3, 456789))

        assert result.microsecond == 0


class TestDbTimestamp:
    """DB 문자열 변환 테스트"""

    def test_format_date(self) -> None:
        assert format_db_ts(date(2025, 1, 10)) == "2025-01-10 00:00:00"

    def test_parse(self) -> None:
        assert parse_db_ts("2025-02-28 23:59:59") == datetime(
            2025, 2, 28, 23, 59, 59, tzinfo=timezone.utc
        )

    def test_lexicographic_order_matches_time(self) -> None:
        """문자열 비교 = 시간 비교"""
        earlier = format_db_ts(datetime(2025, 1, 31, 23, 59, 59))
        later = format_db_ts(datetime(2025, 2, 1))

        assert earlier < later

    def test_now_utc_is_aware(self) -> None:
        assert now_utc().tzinfo == timezone.utc
