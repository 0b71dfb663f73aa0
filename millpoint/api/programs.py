"""NC 程序API路由"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from .. import schemas
from ..auth import get_current_user
from ..models import User
from ..services import ProgramService
from .deps import get_program_service

router = APIRouter(prefix="/programs", tags=["programs"])


def program_query(
    search: Optional[str] = Query(None),
    status: Optional[schemas.ProgramStatus] = Query(None),
    machine_id: Optional[str] = Query(None, alias="machineId"),
    customer: Optional[str] = Query(None),
    part_number: Optional[str] = Query(None, alias="partNumber"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=500),
    sort_by: schemas.ProgramSortField = Query(schemas.ProgramSortField.last_modified, alias="sortBy"),
    sort_order: schemas.SortOrder = Query(schemas.SortOrder.desc, alias="sortOrder"),
) -> schemas.ProgramQuery:
    return schemas.ProgramQuery(
        search=search,
        status=status,
        machine_id=machine_id,
        customer=customer,
        part_number=part_number,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("", response_model=schemas.PageResponse[schemas.ProgramRead])
def list_programs(
    query: schemas.ProgramQuery = Depends(program_query),
    service: ProgramService = Depends(get_program_service),
):
    """程序列表：筛选、排序、分页；search 非空时走搜索引擎"""
    programs, meta = service.list_programs(query)
    return {"success": True, "data": programs, "meta": meta}


@router.get("/{program_id}", response_model=schemas.ApiResponse[schemas.ProgramDetail])
def get_program(program_id: str, service: ProgramService = Depends(get_program_service)):
    return {"success": True, "data": service.get_program(program_id)}


@router.post("", status_code=201, response_model=schemas.ApiResponse[schemas.ProgramRead])
def create_program(
    payload: schemas.ProgramCreate,
    service: ProgramService = Depends(get_program_service),
    current_user: User = Depends(get_current_user),
):
    """创建程序；partNumber 为空时自动编号"""
    program = service.create_program(payload, current_user)
    return {"success": True, "data": program, "message": "Program created successfully"}


@router.put("/{program_id}", response_model=schemas.ApiResponse[schemas.ProgramRead])
def update_program(
    program_id: str,
    payload: schemas.ProgramUpdate,
    service: ProgramService = Depends(get_program_service),
    current_user: User = Depends(get_current_user),
):
    program = service.update_program(program_id, payload, current_user)
    return {"success": True, "data": program, "message": "Program updated successfully"}


@router.delete("/{program_id}", response_model=schemas.MessageResponse)
def delete_program(
    program_id: str,
    service: ProgramService = Depends(get_program_service),
    current_user: User = Depends(get_current_user),
):
    service.delete_program(program_id, current_user)
    return {"success": True, "message": "Program deleted successfully"}


@router.post("/{program_id}/approve", response_model=schemas.ApiResponse[schemas.ProgramDetail])
def approve_program(
    program_id: str,
    payload: schemas.ProgramStatusUpdate,
    service: ProgramService = Depends(get_program_service),
    current_user: User = Depends(get_current_user),
):
    """修改程序状态（任意状态之间均可切换）"""
    program = service.update_status(program_id, payload.status, current_user, payload.comments)
    return {"success": True, "data": program, "message": f"Program status updated to {payload.status.value}"}


@router.get("/{program_id}/versions", response_model=schemas.ApiResponse[List[schemas.ProgramVersionRead]])
def list_versions(program_id: str, service: ProgramService = Depends(get_program_service)):
    return {"success": True, "data": service.list_versions(program_id)}


@router.post("/{program_id}/versions", status_code=201, response_model=schemas.ApiResponse[schemas.ProgramVersionRead])
def create_version(
    program_id: str,
    payload: schemas.ProgramVersionCreate,
    service: ProgramService = Depends(get_program_service),
    current_user: User = Depends(get_current_user),
):
    """保存当前 NC 代码为新版本"""
    version = service.create_version(program_id, payload, current_user)
    return {"success": True, "data": version, "message": f"Version {version.version_number} created"}


@router.get("/{program_id}/versions/{version_id}/content", response_class=PlainTextResponse)
def get_version_content(program_id: str, version_id: str, service: ProgramService = Depends(get_program_service)):
    return PlainTextResponse(service.get_version_content(program_id, version_id))
