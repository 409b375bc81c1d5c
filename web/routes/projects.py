"""
프로젝트 API 라우트
"""

from fastapi import APIRouter, Depends, Response, status

from core.ledger.service import LedgerService
from web.dependencies import get_service
from web.models.requests import ProjectCreateRequest, ProjectUpdateRequest
from web.models.responses import ProjectResponse

router = APIRouter(prefix="/api/admin/projects", tags=["Projects"])


@router.get("", response_model=list[ProjectResponse])
async def list_projects(service: LedgerService = Depends(get_service)):
    """프로젝트 목록 (최신순)"""
    projects = await service.list_projects()
    return [ProjectResponse.from_domain(p) for p in projects]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    request: ProjectCreateRequest,
    service: LedgerService = Depends(get_service),
):
    """프로젝트 생성"""
    project = await service.create_project(
        request.name,
        request.client_name,
        request.project_type,
        status=request.status,
        description=request.description,
        total_amount=request.total_amount,
    )
    return ProjectResponse.from_domain(project)


@router.patch("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: int,
    request: ProjectUpdateRequest,
    service: LedgerService = Depends(get_service),
):
    """프로젝트 수정 (전달된 필드만)"""
    changes = request.model_dump(exclude_unset=True)
    project = await service.update_project(project_id, **changes)
    return ProjectResponse.from_domain(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: int, service: LedgerService = Depends(get_service)):
    """프로젝트 삭제 (거래가 남아 있으면 400)"""
    await service.delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
