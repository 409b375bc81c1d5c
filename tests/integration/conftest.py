"""
통합 테스트 공통 fixture

임시 SQLite 파일 + 실제 커넥션 풀 + Ledger 스키마.
"""

from pathlib import Path

import pytest
import pytest_asyncio

from adapters.db.pool import ConnectionPool
from core.ledger.models import Account
from core.ledger.reporter import PeriodReporter
from core.ledger.schema import init_ledger_schema
from core.ledger.settlement import SettlementEngine
from core.ledger.store import LedgerStore
from core.ledger.types import AccountType


@pytest_asyncio.fixture
async def pool(tmp_path: Path) -> ConnectionPool:
    """테스트용 임시 DB 풀"""
    pool = ConnectionPool(tmp_path / "test_ledger.db", max_size=3)
    await pool.connect()
    await init_ledger_schema(pool)
    yield pool
    await pool.close()


@pytest.fixture
def store(pool: ConnectionPool) -> LedgerStore:
    """LedgerStore 인스턴스"""
    return LedgerStore(pool)


@pytest.fixture
def engine(store: LedgerStore) -> SettlementEngine:
    """SettlementEngine 인스턴스"""
    return SettlementEngine(store)


@pytest.fixture
def reporter(store: LedgerStore) -> PeriodReporter:
    """PeriodReporter 인스턴스"""
    return PeriodReporter(store)


@pytest_asyncio.fixture
async def account(store: LedgerStore) -> Account:
    """기본 거래 상대방 계정"""
    return await store.create_account("Acme Yapı", AccountType.SUPPLIER, phone="+90 555 0000")
