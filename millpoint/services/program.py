"""NC 程序业务逻辑

- 创建：零件号为空时按机床计数器自动编号（同机床串行，计数器与插入同一事务）
- 列表：筛选、排序、分页；带关键字时委托搜索引擎，不可用时返回空结果
- 状态：Approved / Released 记录审批时间，其它状态清空；不限制状态跳转
- 版本：版本号 = 当前最大值 + 1（同程序串行），NC 代码快照保存到 versions/
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from .. import crud, schemas
from ..core.numbering import KeyedLocks, format_program_number, wants_auto_number
from ..database.connection import Database
from ..errors import NotFoundError, UpstreamIndexError, ValidationError
from ..models import User
from ..utils.file_storage import FileStorage
from ..utils.helpers import total_pages
from .search import SearchClient, SearchIndexer, program_document
from .setup_sheet import media_file_paths

logger = logging.getLogger(__name__)

APPROVAL_STATUSES = {"Approved", "Released"}
DETAIL_VERSION_LIMIT = 10


class ProgramService:
    def __init__(self, database: Database, search: SearchClient, indexer: SearchIndexer,
                 storage: FileStorage, locks: Optional[KeyedLocks] = None):
        self.database = database
        self.search = search
        self.indexer = indexer
        self.storage = storage
        self.locks = locks or KeyedLocks()

    # 查询
    def list_programs(self, query: schemas.ProgramQuery) -> Tuple[List[schemas.ProgramRead], schemas.PaginationMeta]:
        if query.search and query.search.strip():
            return self._search_programs(query)

        with self.database.transaction() as db:
            rows, total = crud.query_programs(
                db,
                status=query.status.value if query.status else None,
                machine_id=query.machine_id,
                customer=query.customer,
                part_number=query.part_number,
                sort_by=query.sort_by.value,
                sort_order=query.sort_order.value,
                skip=(query.page - 1) * query.limit,
                limit=query.limit,
            )
            data = [schemas.ProgramRead.model_validate(p) for p in rows]
        return data, self._meta(query, total)

    def _search_programs(self, query: schemas.ProgramQuery):
        filters = {
            "status": query.status.value if query.status else None,
            "machineId": query.machine_id,
            "customer": query.customer,
        }
        fetch_limit = max(query.limit * 2, query.page * query.limit)
        try:
            ids = self.search.search(query.search.strip(), filters, limit=fetch_limit)
        except UpstreamIndexError as exc:
            logger.warning("Program search degraded to empty result: %s", exc)
            ids = []
        if not ids:
            return [], self._meta(query, 0)

        with self.database.transaction() as db:
            rows = crud.get_programs_by_ids(db, ids, part_number=query.part_number)
            # 保持搜索引擎返回的顺序
            position = {program_id: idx for idx, program_id in enumerate(ids)}
            rows.sort(key=lambda p: position.get(p.id, len(ids)))
            start = (query.page - 1) * query.limit
            data = [schemas.ProgramRead.model_validate(p) for p in rows[start:start + query.limit]]
        # total 取搜索命中数，而不是零件号过滤后的精确数量
        return data, self._meta(query, len(ids))

    @staticmethod
    def _meta(query: schemas.ProgramQuery, total: int) -> schemas.PaginationMeta:
        return schemas.PaginationMeta(
            page=query.page,
            limit=query.limit,
            total=total,
            totalPages=total_pages(total, query.limit),
        )

    def get_program(self, program_id: str) -> schemas.ProgramDetail:
        with self.database.transaction() as db:
            program = crud.get_program_detail(db, program_id)
            if program is None:
                raise NotFoundError("Program not found")
            detail = schemas.ProgramDetail.model_validate(program)
            machine = schemas.MachineRead.model_validate(program.machine).model_copy(
                update={"program_count": crud.count_programs(db, program.machine_id)}
            )
        return detail.model_copy(update={"machine": machine, "versions": detail.versions[:DETAIL_VERSION_LIMIT]})

    # 写入
    def create_program(self, data: schemas.ProgramCreate, author: User) -> schemas.ProgramRead:
        payload = data.model_dump(mode="json", exclude={"part_number"})
        with self.locks.hold(f"machine:{data.machine_id}"):
            with self.database.transaction() as db:
                machine = crud.get_machine(db, data.machine_id)
                if machine is None:
                    raise NotFoundError("Machine not found")
                if wants_auto_number(data.part_number):
                    part_number = format_program_number(crud.consume_program_number(db, machine.id))
                else:
                    part_number = data.part_number
                program = crud.create_program(db, {**payload, "part_number": part_number, "author_id": author.id})
                result = schemas.ProgramRead.model_validate(program)
                document = program_document(program)
        logger.info("Program %s created (partNumber=%s) by %s", result.id, result.part_number, author.email)
        self.indexer.publish_upsert([document])
        return result

    def update_program(self, program_id: str, data: schemas.ProgramUpdate, actor: User) -> schemas.ProgramRead:
        changes = data.model_dump(mode="json", exclude_unset=True)
        with self.database.transaction() as db:
            program = self._require(db, program_id)
            if changes.get("machine_id") and crud.get_machine(db, changes["machine_id"]) is None:
                raise NotFoundError("Machine not found")
            crud.update_program(db, program, changes)
            result = schemas.ProgramRead.model_validate(program)
            document = program_document(program)
        logger.info("Program %s updated by %s", program_id, actor.email)
        self.indexer.publish_upsert([document])
        return result

    def delete_program(self, program_id: str, actor: User) -> None:
        with self.database.transaction() as db:
            program = self._require(db, program_id)
            media_urls = [m.url for sheet in program.setup_sheets for m in sheet.media]
            crud.delete_program(db, program)
        # 装夹单随程序级联删除，其上传的媒体文件一并清理；NC / 版本文件保留
        for path in media_file_paths(self.storage, media_urls):
            self.storage.delete_file(path)
        logger.info("Program %s deleted by %s", program_id, actor.email)
        self.indexer.publish_delete(program_id)

    def update_status(self, program_id: str, status: schemas.ProgramStatus, approver: User,
                      comments: Optional[str] = None) -> schemas.ProgramDetail:
        with self.database.transaction() as db:
            program = self._require(db, program_id)
            crud.update_program(db, program, {
                "status": status.value,
                "approver_id": approver.id,
                "approved_at": datetime.utcnow() if status.value in APPROVAL_STATUSES else None,
            })
            document = program_document(program)
        logger.info("Program %s status -> %s by %s%s", program_id, status.value, approver.email,
                    f" ({comments})" if comments else "")
        self.indexer.publish_upsert([document])
        return self.get_program(program_id)

    # 版本
    def create_version(self, program_id: str, data: schemas.ProgramVersionCreate, actor: User) -> schemas.ProgramVersionRead:
        with self.locks.hold(f"program:{program_id}"):
            with self.database.transaction() as db:
                program = self._require(db, program_id)
                code = data.nc_code if data.nc_code is not None else program.nc_code
                if code is None:
                    raise ValidationError(details=[{"path": "ncCode", "message": "Program has no NC code to version"}])

                version_number = crud.latest_version_number(db, program_id) + 1
                stored = self.storage.save_text(code, f"{program.part_number}.nc", "nc")
                snapshot = None
                try:
                    snapshot = self.storage.create_version(stored.filepath, version_number)
                    version = crud.create_version(db, {
                        "program_id": program_id,
                        "version_number": version_number,
                        "revision": data.revision,
                        "file_path": snapshot,
                        "change_log": data.change_log,
                        "created_by_id": actor.id,
                    })
                    changes = {"revision": data.revision}
                    if data.nc_code is not None:
                        changes["nc_code"] = data.nc_code
                    crud.update_program(db, program, changes)
                    db.flush()
                except Exception:
                    self.storage.delete_file(stored.filepath)
                    if snapshot:
                        self.storage.delete_file(snapshot)
                    raise
                result = schemas.ProgramVersionRead.model_validate(version)
                document = program_document(program)
        logger.info("Program %s version %s (rev %s) by %s", program_id, version_number, data.revision, actor.email)
        self.indexer.publish_upsert([document])
        return result

    def list_versions(self, program_id: str) -> List[schemas.ProgramVersionRead]:
        with self.database.transaction() as db:
            self._require(db, program_id)
            return [schemas.ProgramVersionRead.model_validate(v) for v in crud.list_versions(db, program_id)]

    def get_version_content(self, program_id: str, version_id: str) -> str:
        with self.database.transaction() as db:
            version = crud.get_version(db, program_id, version_id)
            if version is None:
                raise NotFoundError("Version not found")
            file_path = version.file_path
        return self.storage.read_file(file_path).decode("utf-8", errors="replace")

    # 索引修复
    def reindex_all(self, clear: bool = False) -> int:
        """把全部程序重新写入搜索索引（手动修复索引漂移）"""
        with self.database.transaction() as db:
            documents = [program_document(p) for p in crud.list_all_programs(db)]
        if clear:
            self.indexer.publish_clear()
        self.indexer.publish_upsert(documents)
        logger.info("Queued %s programs for reindexing", len(documents))
        return len(documents)

    @staticmethod
    def _require(db, program_id: str):
        program = crud.get_program(db, program_id)
        if program is None:
            raise NotFoundError("Program not found")
        return program
