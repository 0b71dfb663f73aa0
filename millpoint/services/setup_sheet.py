"""装夹单业务逻辑

装夹单属于一个程序，包含刀具、原点、夹具、媒体四类子集合。
- 创建 / 删除时同步维护 program.has_setup_sheet
- 更新时，请求中出现的集合整体替换，所有替换在同一事务中完成
- 审批：approved=true 记录审批人和时间，false 清空
- 媒体上传：限制类型、大小和数量，文件保存在 media/ 目录
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from .. import crud, schemas
from ..config.settings import settings as default_settings
from ..core.numbering import KeyedLocks
from ..database.connection import Database
from ..errors import NotFoundError, ValidationError
from ..models import User
from ..utils.file_storage import FileStorage

logger = logging.getLogger(__name__)

MEDIA_URL_PREFIX = "/api/files/media/"

ALLOWED_MEDIA_TYPES = {
    "image/jpeg": "image",
    "image/png": "image",
    "image/gif": "image",
    "image/webp": "image",
    "video/mp4": "video",
    "video/webm": "video",
    "video/quicktime": "video",
}


@dataclass
class IncomingFile:
    """路由层读取到的上传文件"""
    filename: str
    content_type: str
    data: bytes


def collection_errors(tools=None, origin_offsets=None) -> List[Dict[str, Any]]:
    """检查刀具 / 原点集合；传入 None 表示该集合不参与校验"""
    details = []
    if tools is not None:
        if not tools:
            details.append({"path": "tools", "message": "At least one tool is required"})
        for idx, tool in enumerate(tools):
            if tool.tool_number <= 0:
                details.append({"path": f"tools.{idx}.toolNumber", "message": "Tool number must be positive"})
            if not tool.tool_name.strip():
                details.append({"path": f"tools.{idx}.toolName", "message": "Tool name is required"})
    if origin_offsets is not None:
        if not origin_offsets:
            details.append({"path": "originOffsets", "message": "At least one origin offset is required"})
        for idx, offset in enumerate(origin_offsets):
            if not offset.name.strip():
                details.append({"path": f"originOffsets.{idx}.name", "message": "Origin offset name is required"})
    return details


def media_rows(media: List[schemas.MediaIn]) -> List[dict]:
    # 空 url 丢弃；order 缺省为过滤后的下标
    kept = [m for m in media if m.url and m.url.strip()]
    return [
        {
            "type": m.type.value,
            "url": m.url,
            "caption": m.caption,
            "annotations": list(m.annotations),
            "order": m.order if m.order is not None else idx,
        }
        for idx, m in enumerate(kept)
    ]


def _rows(items) -> List[dict]:
    return [item.model_dump(mode="json") for item in items]


def media_file_paths(storage: FileStorage, urls) -> List[str]:
    """上传到本地存储的媒体 url -> 磁盘路径；外部 url 忽略"""
    paths = []
    for url in urls:
        if url and url.startswith(MEDIA_URL_PREFIX):
            paths.append(str(storage.path_for("media", url[len(MEDIA_URL_PREFIX):])))
    return paths


class SetupSheetService:
    def __init__(self, database: Database, storage: FileStorage, settings=None, locks: Optional[KeyedLocks] = None):
        self.database = database
        self.storage = storage
        self.settings = settings or default_settings
        # 与 ProgramService 共用；同一程序的装夹单创建 / 删除按 program:{id} 串行
        self.locks = locks or KeyedLocks()

    def list_by_program(self, program_id: str) -> List[schemas.SetupSheetRead]:
        with self.database.transaction() as db:
            return [schemas.SetupSheetRead.model_validate(s) for s in crud.list_setup_sheets_by_program(db, program_id)]

    def get_setup_sheet(self, sheet_id: str) -> schemas.SetupSheetDetail:
        with self.database.transaction() as db:
            return self._detail(db, sheet_id)

    def create_setup_sheet(self, data: schemas.SetupSheetCreate, actor: User) -> schemas.SetupSheetDetail:
        details = collection_errors(data.tools, data.origin_offsets)
        if details:
            raise ValidationError(details=details)

        with self.locks.hold(f"program:{data.program_id}"):
            with self.database.transaction() as db:
                program = crud.get_program(db, data.program_id, for_update=True)
                if program is None:
                    raise NotFoundError("Program not found")
                machine = crud.get_machine(db, data.machine_id)
                if machine is None:
                    raise NotFoundError("Machine not found")

                sheet = crud.create_setup_sheet(db, {
                    "program_id": program.id,
                    "machine_id": machine.id,
                    "machine_type": data.machine_type or machine.type,
                    "safety_checklist": list(data.safety_checklist),
                    "created_by_id": actor.id,
                })
                crud.replace_tools(db, sheet.id, _rows(data.tools))
                crud.replace_origin_offsets(db, sheet.id, _rows(data.origin_offsets))
                crud.replace_fixtures(db, sheet.id, _rows(data.fixtures))
                crud.replace_media(db, sheet.id, media_rows(data.media))
                program.has_setup_sheet = True
                db.flush()
                sheet_id = sheet.id
                db.expire_all()
                result = self._detail(db, sheet_id)
        logger.info("Setup sheet %s created for program %s by %s", sheet_id, data.program_id, actor.email)
        return result

    def update_setup_sheet(self, sheet_id: str, data: schemas.SetupSheetUpdate, actor: User) -> schemas.SetupSheetDetail:
        fields = data.model_fields_set
        details = collection_errors(
            data.tools if "tools" in fields else None,
            data.origin_offsets if "origin_offsets" in fields else None,
        )
        if details:
            raise ValidationError(details=details)

        with self.database.transaction() as db:
            sheet = crud.get_setup_sheet(db, sheet_id)
            if sheet is None:
                raise NotFoundError("Setup sheet not found")
            dropped_files = []
            if data.machine_type is not None:
                sheet.machine_type = data.machine_type
            if data.safety_checklist is not None:
                sheet.safety_checklist = list(data.safety_checklist)
            if data.tools is not None:
                crud.replace_tools(db, sheet_id, _rows(data.tools))
            if data.origin_offsets is not None:
                crud.replace_origin_offsets(db, sheet_id, _rows(data.origin_offsets))
            if data.fixtures is not None:
                crud.replace_fixtures(db, sheet_id, _rows(data.fixtures))
            if data.media is not None:
                rows = media_rows(data.media)
                kept = {row["url"] for row in rows}
                dropped_files = media_file_paths(self.storage, [m.url for m in sheet.media if m.url not in kept])
                crud.replace_media(db, sheet_id, rows)
            sheet.updated_at = datetime.utcnow()
            db.flush()
            # 子集合是批量删除的，丢弃会话中的旧对象后重新加载
            db.expire_all()
            result = self._detail(db, sheet_id)
        # 事务提交后再删除不再引用的上传文件
        for path in dropped_files:
            self.storage.delete_file(path)
        logger.info("Setup sheet %s updated by %s", sheet_id, actor.email)
        return result

    def delete_setup_sheet(self, sheet_id: str, actor: User) -> None:
        with self.database.transaction() as db:
            sheet = crud.get_setup_sheet(db, sheet_id)
            if sheet is None:
                raise NotFoundError("Setup sheet not found")
            program_id = sheet.program_id

        with self.locks.hold(f"program:{program_id}"):
            with self.database.transaction() as db:
                program = crud.get_program(db, program_id, for_update=True)
                sheet = crud.get_setup_sheet(db, sheet_id)
                if sheet is None:
                    raise NotFoundError("Setup sheet not found")
                local_files = media_file_paths(self.storage, [m.url for m in sheet.media])
                crud.delete_setup_sheet(db, sheet)
                if program is not None and crud.count_setup_sheets_for_program(db, program_id) == 0:
                    program.has_setup_sheet = False
                    db.flush()
        for path in local_files:
            self.storage.delete_file(path)
        logger.info("Setup sheet %s deleted by %s", sheet_id, actor.email)

    def approve_setup_sheet(self, sheet_id: str, data: schemas.SetupSheetApprove, actor: User) -> schemas.SetupSheetDetail:
        with self.database.transaction() as db:
            sheet = crud.get_setup_sheet(db, sheet_id)
            if sheet is None:
                raise NotFoundError("Setup sheet not found")
            if data.approved:
                sheet.approved_by_id = actor.id
                sheet.approved_at = datetime.utcnow()
            else:
                sheet.approved_by_id = None
                sheet.approved_at = None
            db.flush()
            result = self._detail(db, sheet_id)
        logger.info("Setup sheet %s %s by %s", sheet_id, "approved" if data.approved else "approval cleared", actor.email)
        return result

    # 媒体
    def upload_media(self, sheet_id: str, files: List[IncomingFile], actor: User) -> List[schemas.UploadedMedia]:
        if not files:
            raise ValidationError("No files uploaded")
        details = self._file_errors(files)
        if details:
            raise ValidationError(details=details)

        with self.database.transaction() as db:
            if crud.get_setup_sheet(db, sheet_id) is None:
                raise NotFoundError("Setup sheet not found")

            saved = []
            uploaded = []
            try:
                order = crud.next_media_order(db, sheet_id)
                for incoming in files:
                    stored = self.storage.save_bytes(incoming.data, incoming.filename, "media", incoming.content_type)
                    saved.append(stored)
                    media = crud.add_media(db, sheet_id, {
                        "type": ALLOWED_MEDIA_TYPES[incoming.content_type],
                        "url": f"{MEDIA_URL_PREFIX}{stored.filename}",
                        "caption": incoming.filename,
                        "annotations": [],
                        "order": order,
                    })
                    order += 1
                    uploaded.append(schemas.UploadedMedia(
                        id=media.id,
                        type=media.type,
                        url=media.url,
                        caption=media.caption,
                        filename=stored.filename,
                        size=stored.size,
                        mimetype=stored.mimetype,
                    ))
            except Exception:
                for stored in saved:
                    self.storage.delete_file(stored.filepath)
                raise
        logger.info("%s media file(s) uploaded to setup sheet %s by %s", len(uploaded), sheet_id, actor.email)
        return uploaded

    def delete_media(self, sheet_id: str, media_id: str, actor: User) -> None:
        with self.database.transaction() as db:
            if crud.get_setup_sheet(db, sheet_id) is None:
                raise NotFoundError("Setup sheet not found")
            media = crud.get_media(db, sheet_id, media_id)
            if media is None:
                raise NotFoundError("Media not found")
            local_files = media_file_paths(self.storage, [media.url])
            crud.delete_media(db, media)
        for path in local_files:
            self.storage.delete_file(path)
        logger.info("Media %s removed from setup sheet %s by %s", media_id, sheet_id, actor.email)

    def _file_errors(self, files: List[IncomingFile]) -> List[Dict[str, Any]]:
        details = []
        if len(files) > self.settings.MAX_UPLOAD_FILES:
            details.append({"path": "files", "message": f"At most {self.settings.MAX_UPLOAD_FILES} files per upload"})
        for idx, incoming in enumerate(files):
            if incoming.content_type not in ALLOWED_MEDIA_TYPES:
                details.append({"path": f"files.{idx}", "message": f"Unsupported media type: {incoming.content_type}"})
            if len(incoming.data) > self.settings.MAX_UPLOAD_BYTES:
                details.append({"path": f"files.{idx}", "message": f"File {incoming.filename} exceeds the upload size limit"})
        return details

    @staticmethod
    def _detail(db, sheet_id: str) -> schemas.SetupSheetDetail:
        sheet = crud.get_setup_sheet_detail(db, sheet_id)
        if sheet is None:
            raise NotFoundError("Setup sheet not found")
        return schemas.SetupSheetDetail.model_validate(sheet)
