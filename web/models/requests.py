"""
요청 스키마 (Pydantic)

Admin API 요청 데이터 검증.
금액은 문자열/숫자 모두 허용하고, 양수/소수점 자리수 검증은 core에서 수행 (400).
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from core.ledger.types import AccountType, ProjectStatus


class AccountCreateRequest(BaseModel):
    """계정 생성 요청"""

    name: str = Field(..., description="거래 상대방 이름")
    account_type: AccountType = Field(..., description="계정 유형 (customer/supplier/other)")
    phone: str | None = Field(default=None, description="전화번호")
    email: str | None = Field(default=None, description="이메일")
    address: str | None = Field(default=None, description="주소")


class AccountUpdateRequest(BaseModel):
    """계정 수정 요청 (전달된 필드만 변경)"""

    name: str | None = Field(default=None, description="거래 상대방 이름")
    account_type: AccountType | None = Field(default=None, description="계정 유형")
    phone: str | None = Field(default=None, description="전화번호")
    email: str | None = Field(default=None, description="이메일")
    address: str | None = Field(default=None, description="주소")


class ProjectCreateRequest(BaseModel):
    """프로젝트 생성 요청"""

    name: str = Field(..., description="프로젝트 이름")
    client_name: str = Field(..., description="고객 이름")
    project_type: str = Field(..., description="프로젝트 유형")
    status: ProjectStatus = Field(default=ProjectStatus.PLANNED, description="상태")
    description: str | None = Field(default=None, description="설명")
    total_amount: str | int | float | None = Field(default=None, description="총 금액")


class ProjectUpdateRequest(BaseModel):
    """프로젝트 수정 요청 (전달된 필드만 변경)"""

    name: str | None = Field(default=None, description="프로젝트 이름")
    client_name: str | None = Field(default=None, description="고객 이름")
    project_type: str | None = Field(default=None, description="프로젝트 유형")
    status: ProjectStatus | None = Field(default=None, description="상태")
    description: str | None = Field(default=None, description="설명")
    total_amount: str | int | float | None = Field(default=None, description="총 금액")


class TransactionCreateRequest(BaseModel):
    """거래 생성 요청"""

    type: str = Field(..., description="거래 유형 (debt/credit/payment_made/payment_received)")
    amount: str | int | float = Field(..., description="금액 (0 초과, 소수점 2자리 이하)")
    description: str = Field(..., description="설명")
    transaction_date: date | datetime = Field(..., description="거래 일자 (UTC)")
    account_id: int | None = Field(default=None, description="계정 ID")
    project_id: int | None = Field(default=None, description="프로젝트 ID")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "type": "debt",
                    "amount": "1000.00",
                    "description": "Malzeme",
                    "transaction_date": "2025-01-10",
                    "account_id": 1,
                },
            ]
        }
    }


class PartialSettleRequest(BaseModel):
    """분할 정산 요청"""

    parent_id: int = Field(..., description="채무 거래 ID")
    amount: str | int | float = Field(..., description="정산 금액 (잔여 금액 이하)")
    description: str = Field(..., description="설명")
    transaction_date: date | datetime = Field(..., description="정산 일자 (UTC)")


class SettleRequest(BaseModel):
    """전액 정산 요청 (모두 선택)"""

    description: str | None = Field(default=None, description="설명")
    transaction_date: date | datetime | None = Field(default=None, description="정산 일자")
