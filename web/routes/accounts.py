"""
거래 상대방 계정 API 라우트
"""

from fastapi import APIRouter, Depends, Response, status

from core.ledger.service import LedgerService
from web.dependencies import get_service
from web.models.requests import AccountCreateRequest, AccountUpdateRequest
from web.models.responses import AccountResponse

router = APIRouter(prefix="/api/admin/accounts", tags=["Accounts"])


@router.get("", response_model=list[AccountResponse])
async def list_accounts(service: LedgerService = Depends(get_service)):
    """계정 목록 (이름순)"""
    accounts = await service.list_accounts()
    return [AccountResponse.from_domain(a) for a in accounts]


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    request: AccountCreateRequest,
    service: LedgerService = Depends(get_service),
):
    """계정 생성"""
    account = await service.create_account(
        request.name,
        request.account_type,
        phone=request.phone,
        email=request.email,
        address=request.address,
    )
    return AccountResponse.from_domain(account)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(account_id: int, service: LedgerService = Depends(get_service)):
    """계정 단건 조회"""
    return AccountResponse.from_domain(await service.get_account(account_id))


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    request: AccountUpdateRequest,
    service: LedgerService = Depends(get_service),
):
    """계정 수정 (전달된 필드만)"""
    changes = request.model_dump(exclude_unset=True)
    account = await service.update_account(account_id, **changes)
    return AccountResponse.from_domain(account)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: int, service: LedgerService = Depends(get_service)):
    """계정 삭제 (거래가 남아 있으면 400)"""
    await service.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
