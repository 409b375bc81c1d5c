"""
Ledger 데이터 모델

DB 행을 표준화한 도메인 모델.
모든 금액은 Decimal 타입 사용.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from core.ledger.types import AccountType, ProjectStatus, TransactionType


@dataclass(frozen=True)
class Account:
    """거래 상대방 계정 (Current Account)

    total_debt / total_credit / balance는 거래 내역에서 재계산되는 캐시 값.

    Attributes:
        balance: total_debt - total_credit
    """

    id: int
    name: str
    account_type: AccountType
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    total_debt: Decimal = Decimal("0.00")
    total_credit: Decimal = Decimal("0.00")
    balance: Decimal = Decimal("0.00")
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Project:
    """프로젝트 (거래의 선택적 참조 대상)"""

    id: int
    name: str
    client_name: str
    project_type: str
    status: ProjectStatus = ProjectStatus.PLANNED
    description: str | None = None
    total_amount: Decimal | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass(frozen=True)
class Transaction:
    """저장된 거래 (Ledger entry)

    parent_id가 있으면 해당 채무(obligation)에 연결된 정산 거래.
    """

    id: int
    type: TransactionType
    amount: Decimal
    description: str
    transaction_date: datetime
    account_id: int | None = None
    project_id: int | None = None
    parent_id: int | None = None
    idempotency_key: str | None = None
    created_at: str | None = None

    @property
    def is_obligation(self) -> bool:
        return self.type.is_obligation


@dataclass
class NewTransaction:
    """저장 전 거래 입력값

    amount는 저장 시점에 검증 (parse_amount).
    """

    type: TransactionType | str
    amount: Decimal | int | float | str
    description: str
    transaction_date: date | datetime
    account_id: int | None = None
    project_id: int | None = None
    parent_id: int | None = None


@dataclass(frozen=True)
class PendingObligation:
    """미정산 채무

    remaining_amount = amount - paid_amount (항상 파생 값, 저장하지 않음)
    """

    id: int
    type: TransactionType
    amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    description: str
    date: datetime
    account_id: int | None = None


@dataclass(frozen=True)
class MonthlySummary:
    """월별 수입/지출 요약

    income = credit + payment_received
    expense = debt + payment_made
    """

    year: int
    month: int
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class YearTotals:
    """연간 합계 (월별 요약 검증용 직접 집계)"""

    year: int
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class FinanceStats:
    """재무 현황 카드 데이터

    Attributes:
        total_receivables: 미정산 credit 잔여 합계
        total_payables: 미정산 debt 잔여 합계
        monthly_income: 이번 달 수입
        monthly_expenses: 이번 달 지출
    """

    total_receivables: Decimal
    total_payables: Decimal
    monthly_income: Decimal
    monthly_expenses: Decimal

    @property
    def net_balance(self) -> Decimal:
        return self.total_receivables - self.total_payables
