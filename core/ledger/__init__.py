"""
거래처 원장 (Current-Account Ledger) 시스템

거래 상대방별 채무(debt/credit)와 정산(payment_made/payment_received)을 추적.
거래 내역이 원천 데이터이며, 계정 잔액은 거래 변경 시마다 재계산.

사용 예시:
```python
from core.ledger import LedgerService

service = LedgerService(pool)

# 채무 생성
debt = await service.create_transaction("debt", "1000", "Malzeme", date(2025, 1, 10))

# 분할 정산
await service.partial_settle(debt.id, "400", "ilk ödeme", date(2025, 1, 15))

# 미정산 목록
pending = await service.list_pending()
```
"""

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
from core.ledger.schema import init_ledger_schema
from core.ledger.service import LedgerService
from core.ledger.settlement import SettlementEngine
from core.ledger.store import LedgerStore
from core.ledger.types import (
    INFLOW_TYPES,
    OUTFLOW_TYPES,
    AccountType,
    ProjectStatus,
    TransactionType,
)

__all__ = [
    # 핵심 클래스
    "LedgerService",
    "LedgerStore",
    "BalanceAggregator",
    "SettlementEngine",
    "PeriodReporter",
    "init_ledger_schema",
    # 모델
    "Account",
    "Project",
    "Transaction",
    "NewTransaction",
    "PendingObligation",
    "MonthlySummary",
    "YearTotals",
    "FinanceStats",
    # Enum
    "TransactionType",
    "AccountType",
    "ProjectStatus",
    # 상수
    "INFLOW_TYPES",
    "OUTFLOW_TYPES",
]
