"""
Ledger 타입 정의

거래 유형, 계정 유형 등 Ledger 시스템에서 사용하는 Enum 정의.
type은 구조적 태그일 뿐이며, 화면 표시용 의미(매입채무/매출채권, 지출/수입)는
프레젠테이션 레이어에서 결정.
"""

from enum import Enum


class TransactionType(str, Enum):
    """거래 유형

    str을 상속하여 JSON 직렬화 가능.
    """

    # 채무 (Obligation)
    DEBT = "debt"
    CREDIT = "credit"

    # 정산 (Settlement)
    PAYMENT_MADE = "payment_made"
    PAYMENT_RECEIVED = "payment_received"

    @property
    def is_obligation(self) -> bool:
        return self in OBLIGATION_TYPES

    @property
    def is_settlement(self) -> bool:
        return self in SETTLEMENT_TYPES


class AccountType(str, Enum):
    """계정 유형 (거래 상대방 구분)"""

    CUSTOMER = "customer"
    SUPPLIER = "supplier"
    OTHER = "other"


class ProjectStatus(str, Enum):
    """프로젝트 상태"""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OBLIGATION_TYPES: frozenset[TransactionType] = frozenset({
    TransactionType.DEBT,
    TransactionType.CREDIT,
})

SETTLEMENT_TYPES: frozenset[TransactionType] = frozenset({
    TransactionType.PAYMENT_MADE,
    TransactionType.PAYMENT_RECEIVED,
})

# 잔액 집계 버킷
# balance = outflow - inflow
OUTFLOW_TYPES: frozenset[TransactionType] = frozenset({
    TransactionType.DEBT,
    TransactionType.PAYMENT_MADE,
})

INFLOW_TYPES: frozenset[TransactionType] = frozenset({
    TransactionType.CREDIT,
    TransactionType.PAYMENT_RECEIVED,
})

# 채무 유형 → 정산 유형
SETTLEMENT_COUNTERPART: dict[TransactionType, TransactionType] = {
    TransactionType.DEBT: TransactionType.PAYMENT_MADE,
    TransactionType.CREDIT: TransactionType.PAYMENT_RECEIVED,
}


def sql_in(types: frozenset[TransactionType]) -> str:
    """SQL IN 절용 리터럴 목록 생성

    Enum 값만 사용하므로 SQL 인젝션 위험 없음.

    Example:
        >>> sql_in(OBLIGATION_TYPES)
        "('credit', 'debt')"
    """
    return "(" + ", ".join(f"'{t.value}'" for t in sorted(types, key=lambda t: t.value)) + ")"
