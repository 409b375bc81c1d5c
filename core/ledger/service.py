"""
Ledger 서비스 (Admin API용 Facade)

모든 작업을 ResilientExecutor로 감싸서 실행.
- 조회 작업: 일시적 끊김 시 자동 재시도
- 변경 작업: idempotency_key가 있을 때만 재시도 (없으면 1회)

사용 예시:
```python
pool = ConnectionPool(db_path)
await pool.connect()
await init_ledger_schema(pool)

service = LedgerService(pool)
account = await service.create_account("Acme", "customer")
tx = await service.create_transaction("debt", "1000", "Malzeme", date(2025, 1, 10), account.id)
await service.partial_settle(tx.id, "400", "ilk ödeme", date(2025, 1, 15))
```
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from decimal import Decimal
from functools import partial
from typing import Any, Awaitable, Callable, TypeVar

from adapters.db.pool import ConnectionPool
from adapters.db.retry import ResilientExecutor
from core.config.loader import RetryConfig
from core.constants import Defaults
from core.ledger.balance import BalanceAggregator
from core.ledger.models import (
    Account,
    FinanceStats,
    MonthlySummary,
    NewTransaction,
    PendingObligation,
    Project,
    Transaction,
    YearTotals,
)
from core.ledger.reporter import PeriodReporter
from core.ledger.settlement import SettlementEngine
from core.ledger.store import LedgerStore
from core.ledger.types import AccountType, ProjectStatus, TransactionType

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LedgerService:
    """Ledger Facade

    Args:
        pool: 연결된 커넥션 풀 (소유권은 호출자)
        retry: 재시도 설정 (None이면 기본값)
        sleep: 백오프 대기 함수 (테스트에서 주입)
    """

    def __init__(
        self,
        pool: ConnectionPool,
        retry: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        retry = retry or RetryConfig()
        self.pool = pool
        self.aggregator = BalanceAggregator(pool)
        self.store = LedgerStore(pool, self.aggregator)
        self.engine = SettlementEngine(self.store)
        self.reporter = PeriodReporter(self.store)
        self.executor = ResilientExecutor(
            pool,
            max_retries=retry.max_attempts,
            base_delay_ms=retry.base_delay_ms,
            sleep=sleep,
        )

    async def _read(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        return await self.executor.wrap(partial(func, *args, **kwargs))

    async def _write(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        idempotency_key: str | None = None,
        **kwargs: Any,
    ) -> T:
        if idempotency_key is not None:
            kwargs["idempotency_key"] = idempotency_key
        return await self.executor.wrap(
            partial(func, *args, **kwargs),
            mutating=True,
            idempotency_key=idempotency_key,
        )

    async def ping(self) -> bool:
        """DB 연결 확인 (wake probe)"""
        return await self.pool.ping()

    # =====================================
    # 계정
    # =====================================

    async def create_account(
        self,
        name: str,
        account_type: AccountType | str,
        phone: str | None = None,
        email: str | None = None,
        address: str | None = None,
    ) -> Account:
        return await self._write(
            self.store.create_account, name, account_type, phone=phone, email=email, address=address
        )

    async def list_accounts(self) -> list[Account]:
        return await self._read(self.store.list_accounts)

    async def get_account(self, account_id: int) -> Account:
        """계정 조회 (없으면 NotFoundError)"""
        return await self._read(self.store.require_account, account_id)

    async def update_account(self, account_id: int, **changes: Any) -> Account:
        return await self._write(self.store.update_account, account_id, **changes)

    async def delete_account(self, account_id: int) -> None:
        await self._write(self.store.delete_account, account_id)

    # =====================================
    # 프로젝트
    # =====================================

    async def create_project(
        self,
        name: str,
        client_name: str,
        project_type: str,
        status: ProjectStatus | str = ProjectStatus.PLANNED,
        description: str | None = None,
        total_amount: Decimal | str | None = None,
    ) -> Project:
        return await self._write(
            self.store.create_project,
            name,
            client_name,
            project_type,
            status=status,
            description=description,
            total_amount=total_amount,
        )

    async def list_projects(self) -> list[Project]:
        return await self._read(self.store.list_projects)

    async def update_project(self, project_id: int, **changes: Any) -> Project:
        return await self._write(self.store.update_project, project_id, **changes)

    async def delete_project(self, project_id: int) -> None:
        await self._write(self.store.delete_project, project_id)

    # =====================================
    # 거래
    # =====================================

    async def create_transaction(
        self,
        type: TransactionType | str,
        amount: Decimal | int | float | str,
        description: str,
        transaction_date: date | datetime,
        account_id: int | None = None,
        project_id: int | None = None,
        idempotency_key: str | None = None,
    ) -> Transaction:
        """거래 생성 (정산 연결 없음)

        채무에 연결된 정산은 partial_settle / settle 사용.
        """
        new = NewTransaction(
            type=type,
            amount=amount,
            description=description,
            transaction_date=transaction_date,
            account_id=account_id,
            project_id=project_id,
        )
        return await self._write(self.store.append, new, idempotency_key=idempotency_key)

    async def list_transactions(self, account_id: int | None = None) -> list[Transaction]:
        return await self._read(self.store.list_transactions, account_id)

    async def delete_transaction(self, transaction_id: int) -> Transaction:
        return await self._write(self.store.delete_transaction, transaction_id)

    # =====================================
    # 정산
    # =====================================

    async def partial_settle(
        self,
        parent_id: int,
        amount: Decimal | int | float | str,
        description: str,
        settled_at: date | datetime,
        idempotency_key: str | None = None,
    ) -> Transaction:
        return await self._write(
            self.engine.partial_settle,
            parent_id,
            amount,
            description,
            settled_at,
            idempotency_key=idempotency_key,
        )

    async def settle(
        self,
        transaction_id: int,
        description: str | None = None,
        settled_at: date | datetime | None = None,
        idempotency_key: str | None = None,
    ) -> Transaction | None:
        """잔여 금액 전체 정산 (no-op이면 None)"""
        return await self._write(
            self.engine.settle,
            transaction_id,
            description=description,
            settled_at=settled_at,
            idempotency_key=idempotency_key,
        )

    # =====================================
    # 리포트
    # =====================================

    async def list_pending(self) -> list[PendingObligation]:
        return await self._read(self.reporter.pending_list)

    async def list_recent(
        self,
        limit: int = Defaults.RECENT_LIMIT,
        period: str = "all",
    ) -> list[Transaction]:
        return await self._read(self.reporter.recent_list, limit, period)

    async def monthly_summary(self, year: int) -> list[MonthlySummary]:
        return await self._read(self.reporter.monthly_summary, year)

    async def year_totals(self, year: int) -> YearTotals:
        return await self._read(self.reporter.year_totals, year)

    async def finance_stats(self) -> FinanceStats:
        return await self._read(self.reporter.finance_stats)
