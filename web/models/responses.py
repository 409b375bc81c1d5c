"""
응답 스키마 (Pydantic)

Admin API 응답 데이터 직렬화.
금액은 정밀도 보존을 위해 문자열 ("1000.00").
"""

from datetime import datetime

from pydantic import BaseModel, Field

from core.ledger.models import (
    Account,
    FinanceStats,
    MonthlySummary,
    PendingObligation,
    Project,
    Transaction,
)
from core.utils.timezone import format_db_ts


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태 (ok/degraded)")
    database: bool = Field(..., description="DB wake probe 성공 여부")
    timestamp: datetime = Field(..., description="응답 시간 (UTC)")


class AccountResponse(BaseModel):
    """계정 응답"""

    id: int
    name: str
    account_type: str
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    total_debt: str = Field(..., description="outflow 합계 (debt + payment_made)")
    total_credit: str = Field(..., description="inflow 합계 (credit + payment_received)")
    balance: str = Field(..., description="total_debt - total_credit")
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            account_type=account.account_type.value,
            phone=account.phone,
            email=account.email,
            address=account.address,
            total_debt=str(account.total_debt),
            total_credit=str(account.total_credit),
            balance=str(account.balance),
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class ProjectResponse(BaseModel):
    """프로젝트 응답"""

    id: int
    name: str
    client_name: str
    project_type: str
    status: str
    description: str | None = None
    total_amount: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_domain(cls, project: Project) -> "ProjectResponse":
        return cls(
            id=project.id,
            name=project.name,
            client_name=project.client_name,
            project_type=project.project_type,
            status=project.status.value,
            description=project.description,
            total_amount=str(project.total_amount) if project.total_amount is not None else None,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class TransactionResponse(BaseModel):
    """거래 응답"""

    id: int
    type: str
    amount: str
    description: str
    transaction_date: str = Field(..., description="거래 일자 (UTC, YYYY-MM-DD HH:MM:SS)")
    account_id: int | None = None
    project_id: int | None = None
    parent_id: int | None = None
    created_at: str | None = None

    @classmethod
    def from_domain(cls, tx: Transaction) -> "TransactionResponse":
        return cls(
            id=tx.id,
            type=tx.type.value,
            amount=str(tx.amount),
            description=tx.description,
            transaction_date=format_db_ts(tx.transaction_date),
            account_id=tx.account_id,
            project_id=tx.project_id,
            parent_id=tx.parent_id,
            created_at=tx.created_at,
        )


class SettleResponse(BaseModel):
    """전액 정산 응답

    이미 정산된 경우 settled=False, transaction=None.
    """

    settled: bool
    transaction: TransactionResponse | None = None


class PendingObligationResponse(BaseModel):
    """미정산 채무 응답"""

    id: int
    type: str
    amount: str
    paid_amount: str
    remaining_amount: str
    description: str
    date: str
    account_id: int | None = None

    @classmethod
    def from_domain(cls, item: PendingObligation) -> "PendingObligationResponse":
        return cls(
            id=item.id,
            type=item.type.value,
            amount=str(item.amount),
            paid_amount=str(item.paid_amount),
            remaining_amount=str(item.remaining_amount),
            description=item.description,
            date=format_db_ts(item.date),
            account_id=item.account_id,
        )


class MonthlySummaryResponse(BaseModel):
    """월별 요약 응답"""

    year: int
    month: int
    income: str
    expense: str
    net: str

    @classmethod
    def from_domain(cls, row: MonthlySummary) -> "MonthlySummaryResponse":
        return cls(
            year=row.year,
            month=row.month,
            income=str(row.income),
            expense=str(row.expense),
            net=str(row.net),
        )


class FinanceStatsResponse(BaseModel):
    """재무 현황 응답"""

    total_receivables: str = Field(..., description="미정산 credit 잔여 합계")
    total_payables: str = Field(..., description="미정산 debt 잔여 합계")
    monthly_income: str = Field(..., description="이번 달 수입")
    monthly_expenses: str = Field(..., description="이번 달 지출")
    net_balance: str = Field(..., description="total_receivables - total_payables")

    @classmethod
    def from_domain(cls, stats: FinanceStats) -> "FinanceStatsResponse":
        return cls(
            total_receivables=str(stats.total_receivables),
            total_payables=str(stats.total_payables),
            monthly_income=str(stats.monthly_income),
            monthly_expenses=str(stats.monthly_expenses),
            net_balance=str(stats.net_balance),
        )
