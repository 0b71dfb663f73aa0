"""机床API路由"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from .. import schemas
from ..auth import get_current_user
from ..models import User
from ..services import MachineService
from .deps import get_machine_service

router = APIRouter(prefix="/machines", tags=["machines"])


@router.get("", response_model=schemas.ApiResponse[List[schemas.MachineRead]])
def list_machines(
    type: Optional[str] = Query(None),
    status: Optional[schemas.MachineStatus] = Query(None),
    search: Optional[str] = Query(None),
    service: MachineService = Depends(get_machine_service),
):
    """机床列表（按名称排序，附带程序数量）"""
    machines = service.list_machines(type=type, status=status.value if status else None, search=search)
    return {"success": True, "data": machines}


@router.get("/{machine_id}", response_model=schemas.ApiResponse[schemas.MachineDetail])
def get_machine(machine_id: str, service: MachineService = Depends(get_machine_service)):
    return {"success": True, "data": service.get_machine(machine_id)}


@router.get("/{machine_id}/next-program-number", response_model=schemas.ApiResponse[schemas.NextProgramNumber])
def preview_next_program_number(machine_id: str, service: MachineService = Depends(get_machine_service)):
    """预览下一个自动编号（不消耗计数器）"""
    return {"success": True, "data": service.next_program_number(machine_id)}


@router.post("", status_code=201, response_model=schemas.ApiResponse[schemas.MachineRead])
def create_machine(
    payload: schemas.MachineCreate,
    service: MachineService = Depends(get_machine_service),
    current_user: User = Depends(get_current_user),
):
    machine = service.create_machine(payload, current_user)
    return {"success": True, "data": machine, "message": "Machine created successfully"}


@router.put("/{machine_id}", response_model=schemas.ApiResponse[schemas.MachineRead])
def update_machine(
    machine_id: str,
    payload: schemas.MachineUpdate,
    service: MachineService = Depends(get_machine_service),
    current_user: User = Depends(get_current_user),
):
    machine = service.update_machine(machine_id, payload, current_user)
    return {"success": True, "data": machine, "message": "Machine updated successfully"}


@router.patch("/{machine_id}/status", response_model=schemas.ApiResponse[schemas.MachineRead])
def update_machine_status(
    machine_id: str,
    payload: schemas.MachineStatusUpdate,
    service: MachineService = Depends(get_machine_service),
    current_user: User = Depends(get_current_user),
):
    machine = service.update_status(machine_id, payload.status, current_user)
    return {"success": True, "data": machine, "message": "Machine status updated successfully"}


@router.delete("/{machine_id}", response_model=schemas.MessageResponse)
def delete_machine(
    machine_id: str,
    service: MachineService = Depends(get_machine_service),
    current_user: User = Depends(get_current_user),
):
    """删除机床（仍有程序引用时拒绝）"""
    service.delete_machine(machine_id, current_user)
    return {"success": True, "message": "Machine deleted successfully"}
