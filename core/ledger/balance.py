"""
계정 잔액 재계산 (Balance Aggregator)

계정의 모든 거래를 다시 스캔하여 캐시 값을 갱신.
- outflow 버킷: debt + payment_made → total_debt
- inflow 버킷: credit + payment_received → total_credit
- balance = outflow - inflow

항상 전체 재스캔 (증분 갱신 없음). 재실행해도 결과가 같음 (멱등).
집계와 갱신은 하나의 UPDATE 문으로 실행하여 동시 writer 경합 구간을 최소화.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import aiosqlite

from core.errors import NotFoundError
from core.ledger.types import INFLOW_TYPES, OUTFLOW_TYPES, sql_in
from core.utils.timezone import format_db_ts, now_utc

if TYPE_CHECKING:
    from adapters.db.pool import ConnectionPool

logger = logging.getLogger(__name__)


_OUTFLOW_SUM = f"""
    (SELECT COALESCE(SUM(amount_minor), 0) FROM account_transaction
     WHERE account_id = :account_id AND type IN {sql_in(OUTFLOW_TYPES)})
"""

_INFLOW_SUM = f"""
    (SELECT COALESCE(SUM(amount_minor), 0) FROM account_transaction
     WHERE account_id = :account_id AND type IN {sql_in(INFLOW_TYPES)})
"""

RECOMPUTE_SQL = f"""
    UPDATE current_account SET
        total_debt_minor = {_OUTFLOW_SUM},
        total_credit_minor = {_INFLOW_SUM},
        balance_minor = {_OUTFLOW_SUM} - {_INFLOW_SUM},
        updated_at = :updated_at
    WHERE id = :account_id
"""


class BalanceAggregator:
    """계정 잔액 재계산기

    Args:
        pool: 커넥션 풀
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def recompute(
        self,
        account_id: int,
        conn: aiosqlite.Connection | None = None,
    ) -> None:
        """계정 잔액 재계산

        Args:
            account_id: 계정 ID
            conn: 진행 중인 트랜잭션 연결 (None이면 새 트랜잭션)

        Raises:
            NotFoundError: 계정이 없는 경우
        """
        if conn is None:
            async with self.pool.transaction() as tx_conn:
                await self._recompute(tx_conn, account_id)
            return

        await self._recompute(conn, account_id)

    async def _recompute(self, conn: aiosqlite.Connection, account_id: int) -> None:
        cursor = await conn.execute(
            RECOMPUTE_SQL,
            {"account_id": account_id, "updated_at": format_db_ts(now_utc())},
        )
        if cursor.rowcount == 0:
            raise NotFoundError("account", account_id)

        logger.debug(f"Recomputed balance: account={account_id}")
