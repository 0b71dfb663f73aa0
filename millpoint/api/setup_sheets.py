"""装夹单API路由"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile

from .. import schemas
from ..auth import get_current_user
from ..errors import ValidationError
from ..models import User
from ..services import IncomingFile, SetupSheetService
from .deps import get_setup_sheet_service

router = APIRouter(prefix="/setup-sheets", tags=["setup-sheets"])


@router.get("", response_model=schemas.ApiResponse[List[schemas.SetupSheetRead]])
def list_setup_sheets(
    program_id: Optional[str] = Query(None, alias="programId"),
    service: SetupSheetService = Depends(get_setup_sheet_service),
):
    """按程序列出装夹单（programId 必填）"""
    if not program_id:
        raise ValidationError("programId query parameter is required",
                              details=[{"path": "programId", "message": "Required"}])
    return {"success": True, "data": service.list_by_program(program_id)}


@router.get("/{sheet_id}", response_model=schemas.ApiResponse[schemas.SetupSheetDetail])
def get_setup_sheet(sheet_id: str, service: SetupSheetService = Depends(get_setup_sheet_service)):
    return {"success": True, "data": service.get_setup_sheet(sheet_id)}


@router.post("", status_code=201, response_model=schemas.ApiResponse[schemas.SetupSheetDetail])
def create_setup_sheet(
    payload: schemas.SetupSheetCreate,
    service: SetupSheetService = Depends(get_setup_sheet_service),
    current_user: User = Depends(get_current_user),
):
    sheet = service.create_setup_sheet(payload, current_user)
    return {"success": True, "data": sheet, "message": "Setup sheet created successfully"}


@router.put("/{sheet_id}", response_model=schemas.ApiResponse[schemas.SetupSheetDetail])
def update_setup_sheet(
    sheet_id: str,
    payload: schemas.SetupSheetUpdate,
    service: SetupSheetService = Depends(get_setup_sheet_service),
    current_user: User = Depends(get_current_user),
):
    sheet = service.update_setup_sheet(sheet_id, payload, current_user)
    return {"success": True, "data": sheet, "message": "Setup sheet updated successfully"}


@router.delete("/{sheet_id}", response_model=schemas.MessageResponse)
def delete_setup_sheet(
    sheet_id: str,
    service: SetupSheetService = Depends(get_setup_sheet_service),
    current_user: User = Depends(get_current_user),
):
    service.delete_setup_sheet(sheet_id, current_user)
    return {"success": True, "message": "Setup sheet deleted successfully"}


@router.post("/{sheet_id}/approve", response_model=schemas.ApiResponse[schemas.SetupSheetDetail])
def approve_setup_sheet(
    sheet_id: str,
    payload: schemas.SetupSheetApprove,
    service: SetupSheetService = Depends(get_setup_sheet_service),
    current_user: User = Depends(get_current_user),
):
    sheet = service.approve_setup_sheet(sheet_id, payload, current_user)
    message = "Setup sheet approved" if payload.approved else "Setup sheet approval removed"
    return {"success": True, "data": sheet, "message": message}


@router.post("/{sheet_id}/upload", status_code=201, response_model=schemas.ApiResponse[List[schemas.UploadedMedia]])
def upload_media(
    sheet_id: str,
    request: Request,
    files: List[UploadFile] = File(...),
    service: SetupSheetService = Depends(get_setup_sheet_service),
    current_user: User = Depends(get_current_user),
):
    """上传照片 / 视频（multipart 字段名 files）"""
    # 多读 1 字节即可判断是否超限
    read_limit = request.app.state.settings.MAX_UPLOAD_BYTES + 1
    incoming = [
        IncomingFile(
            filename=upload.filename or "upload",
            content_type=upload.content_type or "application/octet-stream",
            data=upload.file.read(read_limit),
        )
        for upload in files
    ]
    uploaded = service.upload_media(sheet_id, incoming, current_user)
    return {"success": True, "data": uploaded, "message": f"{len(uploaded)} file(s) uploaded"}


@router.delete("/{sheet_id}/media/{media_id}", response_model=schemas.MessageResponse)
def delete_media(
    sheet_id: str,
    media_id: str,
    service: SetupSheetService = Depends(get_setup_sheet_service),
    current_user: User = Depends(get_current_user),
):
    service.delete_media(sheet_id, media_id, current_user)
    return {"success": True, "message": "Media deleted successfully"}
