"""装夹单数据库模型

装夹单及其四类子记录（刀具、工件原点、夹具、媒体）。
子记录随装夹单一起创建、整体替换、级联删除。
"""

from sqlalchemy import JSON, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base, new_id, utcnow

MEDIA_TYPES = ("image", "video")


class SetupSheet(Base):
    """装夹单表"""
    __tablename__ = "setup_sheets"

    id = Column(String(36), primary_key=True, default=new_id)
    program_id = Column(String(36), ForeignKey("nc_programs.id", ondelete="CASCADE"), nullable=False, index=True)
    machine_id = Column(String(36), ForeignKey("machines.id"), nullable=False)
    machine_type = Column(String(255), nullable=False)  # 创建时的机床类型快照
    safety_checklist = Column(JSON, nullable=False, default=list)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    approved_by_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    program = relationship("NCProgram", back_populates="setup_sheets")
    machine = relationship("Machine")
    created_by = relationship("User", foreign_keys=[created_by_id])
    approved_by = relationship("User", foreign_keys=[approved_by_id])

    tools = relationship("Tool", cascade="all, delete-orphan", order_by="Tool.tool_number")
    origin_offsets = relationship("OriginOffset", cascade="all, delete-orphan", order_by="OriginOffset.name")
    fixtures = relationship("Fixture", cascade="all, delete-orphan")
    media = relationship("Media", cascade="all, delete-orphan", order_by="Media.order")


class Tool(Base):
    """刀具表"""
    __tablename__ = "tools"

    id = Column(String(36), primary_key=True, default=new_id)
    setup_sheet_id = Column(String(36), ForeignKey("setup_sheets.id", ondelete="CASCADE"), nullable=False, index=True)
    tool_number = Column(Integer, nullable=False)  # T 号
    tool_name = Column(String(255), nullable=False)
    length = Column(Float, nullable=False)
    offset_h = Column(Float, nullable=False)
    offset_d = Column(Float, nullable=False)
    comment = Column(String(255), nullable=True)


class OriginOffset(Base):
    """工件坐标系（G54…）表"""
    __tablename__ = "origin_offsets"

    id = Column(String(36), primary_key=True, default=new_id)
    setup_sheet_id = Column(String(36), ForeignKey("setup_sheets.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(32), nullable=False)
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    z = Column(Float, nullable=False)
    a = Column(Float, nullable=False, default=0)
    b = Column(Float, nullable=False, default=0)
    c = Column(Float, nullable=False, default=0)


class Fixture(Base):
    """夹具表"""
    __tablename__ = "fixtures"

    id = Column(String(36), primary_key=True, default=new_id)
    setup_sheet_id = Column(String(36), ForeignKey("setup_sheets.id", ondelete="CASCADE"), nullable=False, index=True)
    fixture_id = Column(String(64), nullable=False)
    quantity = Column(Integer, nullable=False)
    setup_description = Column(Text, nullable=True)


class Media(Base):
    """装夹照片 / 视频表"""
    __tablename__ = "media"

    id = Column(String(36), primary_key=True, default=new_id)
    setup_sheet_id = Column(String(36), ForeignKey("setup_sheets.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(*MEDIA_TYPES, name="media_type"), nullable=False)
    url = Column(String(1024), nullable=False)
    caption = Column(String(255), nullable=True)
    annotations = Column(JSON, nullable=False, default=list)
    order = Column(Integer, nullable=False, default=0)
