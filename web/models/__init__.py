"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    AccountCreateRequest,
    AccountUpdateRequest,
    PartialSettleRequest,
    ProjectCreateRequest,
    SettleRequest,
    TransactionCreateRequest,
)
from web.models.responses import (
    AccountResponse,
    FinanceStatsResponse,
    HealthResponse,
    MonthlySummaryResponse,
    PendingObligationResponse,
    ProjectResponse,
    SettleResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "AccountCreateRequest",
    "AccountUpdateRequest",
    "ProjectCreateRequest",
    "TransactionCreateRequest",
    "PartialSettleRequest",
    "SettleRequest",
    # Responses
    "AccountResponse",
    "ProjectResponse",
    "TransactionResponse",
    "SettleResponse",
    "PendingObligationResponse",
    "MonthlySummaryResponse",
    "FinanceStatsResponse",
    "HealthResponse",
]
