"""机床数据操作

定义对机床数据的增删改查操作
"""

from typing import Dict, List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from ..models import DEFAULT_NEXT_PROGRAM_NUMBER, Machine, NCProgram, SetupSheet


def get_machine(db: Session, machine_id: str) -> Optional[Machine]:
    """根据ID获取机床"""
    return db.query(Machine).filter(Machine.id == machine_id).first()


def list_machines(db: Session, type: Optional[str] = None, status: Optional[str] = None, search: Optional[str] = None) -> List[Machine]:
    """按类型（模糊）、状态、关键字（名称/厂商/型号）筛选机床，按名称排序"""
    query = db.query(Machine)
    if type:
        query = query.filter(Machine.type.ilike(f"%{type}%"))
    if status:
        query = query.filter(Machine.status == status)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Machine.name.ilike(pattern),
            Machine.manufacturer.ilike(pattern),
            Machine.model.ilike(pattern),
        ))
    return query.order_by(Machine.name.asc()).all()


def count_programs(db: Session, machine_id: str) -> int:
    return db.query(func.count(NCProgram.id)).filter(NCProgram.machine_id == machine_id).scalar() or 0


def count_programs_by_machine(db: Session, machine_ids: List[str]) -> Dict[str, int]:
    """一次查询统计多台机床的程序数量"""
    if not machine_ids:
        return {}
    rows = (
        db.query(NCProgram.machine_id, func.count(NCProgram.id))
        .filter(NCProgram.machine_id.in_(machine_ids))
        .group_by(NCProgram.machine_id)
        .all()
    )
    return {machine_id: count for machine_id, count in rows}


def count_setup_sheets(db: Session, machine_id: str) -> int:
    return db.query(func.count(SetupSheet.id)).filter(SetupSheet.machine_id == machine_id).scalar() or 0


def list_machine_programs(db: Session, machine_id: str) -> List[NCProgram]:
    return (
        db.query(NCProgram)
        .filter(NCProgram.machine_id == machine_id)
        .order_by(NCProgram.last_modified.desc())
        .all()
    )


def create_machine(db: Session, data: dict) -> Machine:
    """创建机床（调用方负责提交事务）"""
    db_machine = Machine(**data)
    db.add(db_machine)
    db.flush()
    return db_machine


def update_machine(db: Session, db_machine: Machine, data: dict) -> Machine:
    for field, value in data.items():
        setattr(db_machine, field, value)
    db.flush()
    return db_machine


def delete_machine(db: Session, db_machine: Machine) -> None:
    db.delete(db_machine)
    db.flush()


def consume_program_number(db: Session, machine_id: str) -> int:
    """原子地把计数器加 1，返回加 1 之前的值

    UPDATE 会持有该行（SQLite 下为整库）写锁直到事务结束，
    并发事务只能在本事务提交或回滚之后读到新值。
    """
    counter = func.coalesce(Machine.next_program_number, DEFAULT_NEXT_PROGRAM_NUMBER)
    db.execute(
        update(Machine)
        .where(Machine.id == machine_id)
        .values(next_program_number=counter + 1)
        .execution_options(synchronize_session=False)
    )
    new_value = db.query(Machine.next_program_number).filter(Machine.id == machine_id).scalar()
    return new_value - 1
