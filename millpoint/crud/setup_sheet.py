"""装夹单数据操作

子集合的"替换"是显式操作：先删除该装夹单的全部记录，再插入新集合。
"""

from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ..models import Fixture, Media, OriginOffset, SetupSheet, Tool

_DETAIL_OPTIONS = (
    selectinload(SetupSheet.tools),
    selectinload(SetupSheet.origin_offsets),
    selectinload(SetupSheet.fixtures),
    selectinload(SetupSheet.media),
    selectinload(SetupSheet.created_by),
    selectinload(SetupSheet.approved_by),
    selectinload(SetupSheet.machine),
)


def get_setup_sheet(db: Session, sheet_id: str) -> Optional[SetupSheet]:
    return db.query(SetupSheet).filter(SetupSheet.id == sheet_id).first()


def get_setup_sheet_detail(db: Session, sheet_id: str) -> Optional[SetupSheet]:
    return (
        db.query(SetupSheet)
        .options(*_DETAIL_OPTIONS, selectinload(SetupSheet.program))
        .filter(SetupSheet.id == sheet_id)
        .first()
    )


def list_setup_sheets_by_program(db: Session, program_id: str) -> List[SetupSheet]:
    """获取程序的装夹单（新建在前）"""
    return (
        db.query(SetupSheet)
        .options(*_DETAIL_OPTIONS)
        .filter(SetupSheet.program_id == program_id)
        .order_by(SetupSheet.created_at.desc())
        .all()
    )


def count_setup_sheets_for_program(db: Session, program_id: str) -> int:
    return db.query(func.count(SetupSheet.id)).filter(SetupSheet.program_id == program_id).scalar() or 0


def create_setup_sheet(db: Session, data: dict) -> SetupSheet:
    sheet = SetupSheet(**data)
    db.add(sheet)
    db.flush()
    return sheet


def delete_setup_sheet(db: Session, sheet: SetupSheet) -> None:
    db.delete(sheet)
    db.flush()


def _replace(db: Session, model, sheet_id: str, rows: Iterable[dict]) -> list:
    db.query(model).filter(model.setup_sheet_id == sheet_id).delete(synchronize_session=False)
    created = [model(setup_sheet_id=sheet_id, **row) for row in rows]
    db.add_all(created)
    db.flush()
    return created


def replace_tools(db: Session, sheet_id: str, rows: Iterable[dict]) -> List[Tool]:
    return _replace(db, Tool, sheet_id, rows)


def replace_origin_offsets(db: Session, sheet_id: str, rows: Iterable[dict]) -> List[OriginOffset]:
    return _replace(db, OriginOffset, sheet_id, rows)


def replace_fixtures(db: Session, sheet_id: str, rows: Iterable[dict]) -> List[Fixture]:
    return _replace(db, Fixture, sheet_id, rows)


def replace_media(db: Session, sheet_id: str, rows: Iterable[dict]) -> List[Media]:
    return _replace(db, Media, sheet_id, rows)


def get_media(db: Session, sheet_id: str, media_id: str) -> Optional[Media]:
    return db.query(Media).filter(Media.id == media_id, Media.setup_sheet_id == sheet_id).first()


def next_media_order(db: Session, sheet_id: str) -> int:
    current = db.query(func.max(Media.order)).filter(Media.setup_sheet_id == sheet_id).scalar()
    return 0 if current is None else current + 1


def add_media(db: Session, sheet_id: str, data: dict) -> Media:
    media = Media(setup_sheet_id=sheet_id, **data)
    db.add(media)
    db.flush()
    return media


def delete_media(db: Session, media: Media) -> None:
    db.delete(media)
    db.flush()
