"""NC 程序数据操作

封装程序与程序版本的查询，供 ProgramService 调用。
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..models import NCProgram, ProgramVersion, SetupSheet

SORT_COLUMNS = {
    "name": NCProgram.name,
    "partNumber": NCProgram.part_number,
    "lastModified": NCProgram.last_modified,
    "customer": NCProgram.customer,
}


def get_program(db: Session, program_id: str, for_update: bool = False) -> Optional[NCProgram]:
    """根据ID获取程序；for_update 时锁定该行（SQLite 忽略）"""
    query = db.query(NCProgram).filter(NCProgram.id == program_id)
    if for_update:
        query = query.with_for_update()
    return query.first()


def get_program_detail(db: Session, program_id: str) -> Optional[NCProgram]:
    """获取程序及其机床、作者、装夹单（含子集合）、版本"""
    return (
        db.query(NCProgram)
        .options(
            selectinload(NCProgram.machine),
            selectinload(NCProgram.author),
            selectinload(NCProgram.approver),
            selectinload(NCProgram.versions).selectinload(ProgramVersion.created_by),
            selectinload(NCProgram.setup_sheets).selectinload(SetupSheet.tools),
            selectinload(NCProgram.setup_sheets).selectinload(SetupSheet.origin_offsets),
            selectinload(NCProgram.setup_sheets).selectinload(SetupSheet.fixtures),
            selectinload(NCProgram.setup_sheets).selectinload(SetupSheet.media),
        )
        .filter(NCProgram.id == program_id)
        .first()
    )


def _apply_filters(query, status=None, machine_id=None, customer=None, part_number=None):
    if status:
        query = query.filter(NCProgram.status == status)
    if machine_id:
        query = query.filter(NCProgram.machine_id == machine_id)
    if customer:
        query = query.filter(NCProgram.customer.ilike(f"%{customer}%"))
    if part_number:
        query = query.filter(NCProgram.part_number.ilike(f"%{part_number}%"))
    return query


def query_programs(
    db: Session,
    status: Optional[str] = None,
    machine_id: Optional[str] = None,
    customer: Optional[str] = None,
    part_number: Optional[str] = None,
    sort_by: str = "lastModified",
    sort_order: str = "desc",
    skip: int = 0,
    limit: int = 20,
) -> Tuple[List[NCProgram], int]:
    """按条件分页查询程序，返回 (当前页, 总数)"""
    base = _apply_filters(db.query(NCProgram), status, machine_id, customer, part_number)
    total = base.with_entities(func.count(NCProgram.id)).scalar() or 0
    column = SORT_COLUMNS.get(sort_by, NCProgram.last_modified)
    ordering = column.asc() if sort_order == "asc" else column.desc()
    rows = (
        base.options(selectinload(NCProgram.machine), selectinload(NCProgram.author))
        .order_by(ordering, NCProgram.id)
        .offset(skip)
        .limit(limit)
        .all()
    )
    return rows, total


def get_programs_by_ids(db: Session, program_ids: Sequence[str], part_number: Optional[str] = None) -> List[NCProgram]:
    """按 id 取程序（可附加零件号模糊过滤），顺序不保证"""
    if not program_ids:
        return []
    query = db.query(NCProgram).options(selectinload(NCProgram.machine), selectinload(NCProgram.author))
    query = _apply_filters(query.filter(NCProgram.id.in_(list(program_ids))), part_number=part_number)
    return query.all()


def list_all_programs(db: Session) -> List[NCProgram]:
    return db.query(NCProgram).all()


def create_program(db: Session, data: dict) -> NCProgram:
    db_program = NCProgram(**data)
    db.add(db_program)
    db.flush()
    return db_program


def update_program(db: Session, db_program: NCProgram, data: dict) -> NCProgram:
    for field, value in data.items():
        setattr(db_program, field, value)
    db.flush()
    return db_program


def delete_program(db: Session, db_program: NCProgram) -> None:
    """删除程序，版本与装夹单随关系级联删除"""
    db.delete(db_program)
    db.flush()


# Versions
def latest_version_number(db: Session, program_id: str) -> int:
    return db.query(func.max(ProgramVersion.version_number)).filter(ProgramVersion.program_id == program_id).scalar() or 0


def create_version(db: Session, data: dict) -> ProgramVersion:
    version = ProgramVersion(**data)
    db.add(version)
    db.flush()
    return version


def list_versions(db: Session, program_id: str) -> List[ProgramVersion]:
    """获取程序版本列表（新版本在前）"""
    return (
        db.query(ProgramVersion)
        .options(selectinload(ProgramVersion.created_by))
        .filter(ProgramVersion.program_id == program_id)
        .order_by(ProgramVersion.version_number.desc())
        .all()
    )


def get_version(db: Session, program_id: str, version_id: str) -> Optional[ProgramVersion]:
    return (
        db.query(ProgramVersion)
        .filter(ProgramVersion.id == version_id, ProgramVersion.program_id == program_id)
        .first()
    )
