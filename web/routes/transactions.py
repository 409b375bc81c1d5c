"""
거래/정산 API 라우트

변경 요청은 Idempotency-Key 헤더가 있을 때만 일시적 끊김 시 재시도됨.
"""

from fastapi import APIRouter, Depends, Query, Response, status

from core.constants import Defaults
from core.ledger.service import LedgerService
from web.dependencies import get_idempotency_key, get_service
from web.models.requests import PartialSettleRequest, SettleRequest, TransactionCreateRequest
from web.models.responses import (
    PendingObligationResponse,
    SettleResponse,
    TransactionResponse,
)

router = APIRouter(prefix="/api/admin/transactions", tags=["Transactions"])


@router.get("", response_model=list[TransactionResponse])
async def list_transactions(
    account_id: int | None = Query(default=None),
    service: LedgerService = Depends(get_service),
):
    """거래 목록 (거래일 최신순)"""
    transactions = await service.list_transactions(account_id)
    return [TransactionResponse.from_domain(t) for t in transactions]


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    request: TransactionCreateRequest,
    service: LedgerService = Depends(get_service),
    idempotency_key: str | None = Depends(get_idempotency_key),
):
    """거래 생성"""
    tx = await service.create_transaction(
        request.type,
        request.amount,
        request.description,
        request.transaction_date,
        account_id=request.account_id,
        project_id=request.project_id,
        idempotency_key=idempotency_key,
    )
    return TransactionResponse.from_domain(tx)


@router.get("/pending", response_model=list[PendingObligationResponse])
async def list_pending(service: LedgerService = Depends(get_service)):
    """미정산 채무 목록"""
    pending = await service.list_pending()
    return [PendingObligationResponse.from_domain(p) for p in pending]


@router.get("/recent", response_model=list[TransactionResponse])
async def list_recent(
    limit: int = Query(default=Defaults.RECENT_LIMIT, ge=1, le=500),
    period: str = Query(default="all", description="all | week | month | year | YYYY-MM"),
    service: LedgerService = Depends(get_service),
):
    """기간 내 최근 거래"""
    transactions = await service.list_recent(limit, period)
    return [TransactionResponse.from_domain(t) for t in transactions]


@router.post("/partial-settle", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def partial_settle(
    request: PartialSettleRequest,
    service: LedgerService = Depends(get_service),
    idempotency_key: str | None = Depends(get_idempotency_key),
):
    """분할 정산"""
    settlement = await service.partial_settle(
        request.parent_id,
        request.amount,
        request.description,
        request.transaction_date,
        idempotency_key=idempotency_key,
    )
    return TransactionResponse.from_domain(settlement)


@router.post("/{transaction_id}/settle", response_model=SettleResponse)
async def settle(
    transaction_id: int,
    request: SettleRequest | None = None,
    service: LedgerService = Depends(get_service),
    idempotency_key: str | None = Depends(get_idempotency_key),
):
    """잔여 금액 전체 정산 (이미 정산된 경우 settled=false)"""
    request = request or SettleRequest()
    settlement = await service.settle(
        transaction_id,
        description=request.description,
        settled_at=request.transaction_date,
        idempotency_key=idempotency_key,
    )
    if settlement is None:
        return SettleResponse(settled=False)
    return SettleResponse(settled=True, transaction=TransactionResponse.from_domain(settlement))


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(transaction_id: int, service: LedgerService = Depends(get_service)):
    """거래 삭제 (정산이 연결된 채무는 400)"""
    await service.delete_transaction(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
