"""LedgerService 통합 테스트

Facade가 모든 작업을 재시도 래퍼로 실행하는지 확인.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from adapters.db.pool import ConnectionPool
from core.config.loader import RetryConfig
from core.errors import NotFoundError, TransientStorageError, ValidationError
from core.ledger.service import LedgerService
from core.ledger.types import TransactionType


@pytest.fixture
def sleep() -> AsyncMock:
    """실제 대기 없이 백오프 기록"""
    return AsyncMock()


@pytest.fixture
def service(pool: ConnectionPool, sleep: AsyncMock) -> LedgerService:
    return LedgerService(pool, RetryConfig(max_attempts=3, base_delay_ms=1000), sleep=sleep)


class TestFacade:
    """Facade 흐름 테스트"""

    @pytest.mark.asyncio
    async def test_obligation_lifecycle(self, service: LedgerService) -> None:
        account = await service.create_account("Acme", "supplier")
        debt = await service.create_transaction(
            "debt", "1000", "Malzeme", date(2025, 1, 10), account_id=account.id
        )

        await service.partial_settle(debt.id, "400", "ilk ödeme", date(2025, 1, 15))
        pending = await service.list_pending()
        assert pending[0].remaining_amount == Decimal("600.00")

        final = await service.settle(debt.id)
        assert final.amount == Decimal("600.00")
        assert await service.list_pending() == []

        assert await service.settle(debt.id) is None

        refreshed = await service.get_account(account.id)
        assert refreshed.balance == refreshed.total_debt - refreshed.total_credit
        assert len(await service.list_transactions(account.id)) == 3

    @pytest.mark.asyncio
    async def test_create_transaction_idempotency_key(self, service: LedgerService) -> None:
        first = await service.create_transaction(
            TransactionType.CREDIT, "500", "Hakediş", date(2025, 2, 1), idempotency_key="k-1"
        )
        second = await service.create_transaction(
            TransactionType.CREDIT, "500", "Hakediş", date(2025, 2, 1), idempotency_key="k-1"
        )

        assert first.id == second.id
        assert len(await service.list_transactions()) == 1

    @pytest.mark.asyncio
    async def test_account_management(self, service: LedgerService) -> None:
        account = await service.create_account("Acme", "customer")

        updated = await service.update_account(account.id, phone="+90 212 000")
        assert updated.phone == "+90 212 000"
        assert [a.id for a in await service.list_accounts()] == [account.id]

        await service.delete_account(account.id)
        with pytest.raises(NotFoundError):
            await service.get_account(account.id)

    @pytest.mark.asyncio
    async def test_projects(self, service: LedgerService) -> None:
        project = await service.create_project("Villa", "Ayşe", "residential")
        tx = await service.create_transaction(
            "credit", "10", "avans", date(2025, 1, 1), project_id=project.id
        )

        assert tx.project_id == project.id
        assert [p.id for p in await service.list_projects()] == [project.id]

    @pytest.mark.asyncio
    async def test_delete_transaction(self, service: LedgerService) -> None:
        tx = await service.create_transaction("debt", "10", "x", date(2025, 1, 1))

        await service.delete_transaction(tx.id)

        assert await service.list_transactions() == []

    @pytest.mark.asyncio
    async def test_reports(self, service: LedgerService) -> None:
        await service.create_transaction("credit", "300", "x", date(2025, 2, 3))
        await service.create_transaction("debt", "100", "y", date(2025, 2, 4))

        summary = await service.monthly_summary(2025)
        totals = await service.year_totals(2025)
        recent = await service.list_recent(10, "2025-02")
        stats = await service.finance_stats()

        assert summary[1].net == Decimal("200.00")
        assert totals.net == Decimal("200.00")
        assert len(recent) == 2
        assert stats.net_balance == stats.total_receivables - stats.total_payables

    @pytest.mark.asyncio
    async def test_validation_propagates(self, service: LedgerService, sleep: AsyncMock) -> None:
        with pytest.raises(ValidationError):
            await service.create_transaction("debt", "0", "x", date(2025, 1, 1))

        sleep.assert_not_awaited()


class TestTransientRecovery:
    """일시적 끊김 복구 테스트"""

    @pytest.mark.asyncio
    async def test_read_retried_after_backoff(
        self, service: LedgerService, sleep: AsyncMock
    ) -> None:
        """첫 저장소 호출이 끊기면 1000ms 이상 대기 후 재시도 성공"""
        await service.create_account("Acme", "customer")
        original = service.store.list_accounts
        service.store.list_accounts = AsyncMock(
            side_effect=[TransientStorageError("endpoint is disabled"), await original()]
        )

        accounts = await service.list_accounts()

        assert [a.name for a in accounts] == ["Acme"]
        assert service.store.list_accounts.await_count == 2
        sleep.assert_awaited_once()
        assert sleep.await_args.args[0] >= 1.0
        # wake probe는 읽기 전용이므로 데이터 변화 없음
        assert len(await original()) == 1

    @pytest.mark.asyncio
    async def test_mutation_without_key_not_retried(
        self, service: LedgerService, sleep: AsyncMock
    ) -> None:
        service.store.append = AsyncMock(side_effect=TransientStorageError("connection terminated"))

        with pytest.raises(TransientStorageError):
            await service.create_transaction("debt", "10", "x", date(2025, 1, 1))

        service.store.append.assert_awaited_once()
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_mutation_with_key_retried_without_duplicate(
        self, service: LedgerService, sleep: AsyncMock
    ) -> None:
        """커밋 후 끊김이 나도 같은 키로 재시도하면 중복 없음"""
        real_append = service.store.append
        calls = 0

        async def commit_then_disconnect(new, idempotency_key=None):
            nonlocal calls
            calls += 1
            result = await real_append(new, idempotency_key=idempotency_key)
            if calls == 1:
                raise TransientStorageError("connection terminated")
            return result

        service.store.append = commit_then_disconnect

        tx = await service.create_transaction(
            "debt", "10", "x", date(2025, 1, 1), idempotency_key="retry-1"
        )

        assert calls == 2
        assert sleep.await_count == 1
        service.store.append = real_append
        stored = await service.list_transactions()
        assert [t.id for t in stored] == [tx.id]
