"""
헬스 체크 엔드포인트

GET /api/health - 서버 및 DB 상태 확인
"""

from fastapi import APIRouter, Depends

from core.ledger.service import LedgerService
from core.utils.timezone import now_utc
from web.dependencies import get_service
from web.models.responses import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(service: LedgerService = Depends(get_service)) -> HealthResponse:
    """서버 상태 확인

    DB wake probe가 실패하면 status=degraded.
    """
    database_ok = await service.ping()

    return HealthResponse(
        status="ok" if database_ok else "degraded",
        database=database_ok,
        timestamp=now_utc(),
    )
