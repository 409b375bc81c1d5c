"""
기간별 리포트 (Period Reporter)

- 미정산 채무 목록
- 기간 토큰 기반 최근 거래
- 월별 수입/지출 요약, 연간 합계
- 재무 현황 카드 (미수금/미지급금/이번 달 수입·지출)

income 버킷: credit + payment_received
expense 버킷: debt + payment_made
"""

from __future__ import annotations

import logging
from datetime import datetime

from core.constants import Defaults
from core.errors import ValidationError
from core.ledger.models import FinanceStats, MonthlySummary, PendingObligation, Transaction, YearTotals
from core.ledger.periods import PeriodWindow, month_window, parse_period
from core.ledger.store import LedgerStore
from core.ledger.types import INFLOW_TYPES, OUTFLOW_TYPES, TransactionType, sql_in
from core.utils.money import from_minor
from core.utils.timezone import format_db_ts, now_utc, parse_db_ts

logger = logging.getLogger(__name__)


_INCOME_SUM = f"COALESCE(SUM(CASE WHEN type IN {sql_in(INFLOW_TYPES)} THEN amount_minor ELSE 0 END), 0)"
_EXPENSE_SUM = f"COALESCE(SUM(CASE WHEN type IN {sql_in(OUTFLOW_TYPES)} THEN amount_minor ELSE 0 END), 0)"


def _year_bounds(year: int) -> tuple[str, str]:
    if not 1 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")
    return (
        format_db_ts(month_window(year, 1).start),
        format_db_ts(month_window(year, 12).end),
    )


class PeriodReporter:
    """기간별 리포트

    Args:
        store: Ledger 저장소
    """

    def __init__(self, store: LedgerStore):
        self.store = store
        self.pool = store.pool

    async def pending_list(self) -> list[PendingObligation]:
        """미정산 채무 목록 (remaining > 0, 거래일 최신순)"""
        rows = await self.pool.fetchall(
            """
            SELECT id, type, amount_minor, paid_minor, remaining_minor,
                   description, transaction_date, account_id
            FROM v_obligation_balance
            WHERE remaining_minor > 0
            ORDER BY transaction_date DESC, id DESC
            """
        )
        return [
            PendingObligation(
                id=row["id"],
                type=TransactionType(row["type"]),
                amount=from_minor(row["amount_minor"]),
                paid_amount=from_minor(row["paid_minor"]),
                remaining_amount=from_minor(row["remaining_minor"]),
                description=row["description"],
                date=parse_db_ts(row["transaction_date"]),
                account_id=row["account_id"],
            )
            for row in rows
        ]

    async def recent_list(
        self,
        limit: int = Defaults.RECENT_LIMIT,
        period: str = "all",
        now: datetime | None = None,
    ) -> list[Transaction]:
        """기간 내 최근 거래 (최신순, 최대 limit개)

        Args:
            limit: 최대 개수 (1 이상)
            period: all | week | month | year | YYYY-MM
            now: 기준 시각 (None이면 현재 UTC)

        Raises:
            ValidationError: limit < 1 또는 잘못된 기간 토큰
        """
        if limit < 1:
            raise ValidationError(f"limit must be >= 1: {limit}")

        window = parse_period(period, now or now_utc())
        if window is None:
            return await self.store.list_for_period(None, None, limit=limit)
        return await self.store.list_for_period(window.start, window.end, limit=limit)

    async def monthly_summary(self, year: int) -> list[MonthlySummary]:
        """월별 수입/지출 요약 (거래가 없는 달은 0, 항상 12개)"""
        start, end = _year_bounds(year)
        rows = await self.pool.fetchall(
            f"""
            SELECT CAST(strftime('%m', transaction_date) AS INTEGER) AS month,
                   {_INCOME_SUM} AS income_minor,
                   {_EXPENSE_SUM} AS expense_minor
            FROM account_transaction
            WHERE transaction_date >= ? AND transaction_date <= ?
            GROUP BY month
            """,
            (start, end),
        )
        by_month = {row["month"]: row for row in rows}

        summary = []
        for month in range(1, 13):
            row = by_month.get(month)
            summary.append(
                MonthlySummary(
                    year=year,
                    month=month,
                    income=from_minor(row["income_minor"] if row else 0),
                    expense=from_minor(row["expense_minor"] if row else 0),
                )
            )
        return summary

    async def year_totals(self, year: int) -> YearTotals:
        """연간 합계 (월 구분 없이 직접 집계)"""
        start, end = _year_bounds(year)
        row = await self.pool.fetchone(
            f"""
            SELECT {_INCOME_SUM} AS income_minor, {_EXPENSE_SUM} AS expense_minor
            FROM account_transaction
            WHERE transaction_date >= ? AND transaction_date <= ?
            """,
            (start, end),
        )
        return YearTotals(
            year=year,
            income=from_minor(row["income_minor"]),
            expense=from_minor(row["expense_minor"]),
        )

    async def finance_stats(self, now: datetime | None = None) -> FinanceStats:
        """재무 현황

        - total_receivables: 미정산 credit 잔여 합계
        - total_payables: 미정산 debt 잔여 합계
        - monthly_income / monthly_expenses: 이번 달 1일부터 현재까지
        """
        current = now or now_utc()
        balance_row = await self.pool.fetchone(
            """
            SELECT
                COALESCE(SUM(CASE WHEN type = 'credit' THEN remaining_minor ELSE 0 END), 0)
                    AS receivables_minor,
                COALESCE(SUM(CASE WHEN type = 'debt' THEN remaining_minor ELSE 0 END), 0)
                    AS payables_minor
            FROM v_obligation_balance
            WHERE remaining_minor > 0
            """
        )

        window: PeriodWindow = parse_period("month", current)
        flow_row = await self.pool.fetchone(
            f"""
            SELECT {_INCOME_SUM} AS income_minor, {_EXPENSE_SUM} AS expense_minor
            FROM account_transaction
            WHERE transaction_date >= ? AND transaction_date <= ?
            """,
            (format_db_ts(window.start), format_db_ts(window.end)),
        )

        stats = FinanceStats(
            total_receivables=from_minor(balance_row["receivables_minor"]),
            total_payables=from_minor(balance_row["payables_minor"]),
            monthly_income=from_minor(flow_row["income_minor"]),
            monthly_expenses=from_minor(flow_row["expense_minor"]),
        )
        logger.debug(f"Finance stats: net_balance={stats.net_balance}")
        return stats

