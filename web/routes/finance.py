"""
리포트 API 라우트

월별 수입/지출 요약과 재무 현황 카드.
"""

from fastapi import APIRouter, Depends, Query

from core.ledger.service import LedgerService
from core.utils.timezone import now_utc
from web.dependencies import get_service
from web.models.responses import FinanceStatsResponse, MonthlySummaryResponse

router = APIRouter(prefix="/api/admin", tags=["Finance"])


@router.get("/stats/monthly", response_model=list[MonthlySummaryResponse])
async def monthly_summary(
    year: int | None = Query(default=None, ge=1, le=9999, description="연도 (기본: 올해)"),
    service: LedgerService = Depends(get_service),
):
    """월별 수입/지출 요약 (12개월)"""
    summary = await service.monthly_summary(year or now_utc().year)
    return [MonthlySummaryResponse.from_domain(row) for row in summary]


@router.get("/finance/stats", response_model=FinanceStatsResponse)
async def finance_stats(service: LedgerService = Depends(get_service)):
    """재무 현황 (미수금/미지급금/이번 달 수입·지출)"""
    return FinanceStatsResponse.from_domain(await service.finance_stats())
