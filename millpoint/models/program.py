"""NC 程序与版本数据库模型"""

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base, new_id, utcnow

PROGRAM_STATUSES = ("Draft", "In Review", "Approved", "Released", "Obsolete")


class NCProgram(Base):
    """NC 程序表"""
    __tablename__ = "nc_programs"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    part_number = Column(String(64), nullable=False, index=True)  # 零件号（手填或按机床计数器生成）
    revision = Column(String(32), nullable=False)
    machine_id = Column(String(36), ForeignKey("machines.id"), nullable=False, index=True)
    operation = Column(String(255), nullable=False)
    material = Column(String(255), nullable=False)
    customer = Column(String(255), nullable=False)
    work_order = Column(String(64), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(Enum(*PROGRAM_STATUSES, name="program_status"), nullable=False, default="Draft")
    author_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    approver_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    approved_at = Column(DateTime, nullable=True)
    nc_code = Column(Text, nullable=True)
    # 冗余标记：至少有一张装夹单时为 True，由装夹单服务维护
    has_setup_sheet = Column(Boolean, nullable=False, default=False)
    last_modified = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow, index=True)
    created_at = Column(DateTime, server_default=func.now())

    machine = relationship("Machine", back_populates="programs")
    author = relationship("User", foreign_keys=[author_id])
    approver = relationship("User", foreign_keys=[approver_id])
    versions = relationship(
        "ProgramVersion",
        back_populates="program",
        cascade="all, delete-orphan",
        order_by="ProgramVersion.version_number.desc()",
    )
    setup_sheets = relationship("SetupSheet", back_populates="program", cascade="all, delete-orphan")


class ProgramVersion(Base):
    """程序版本表（只追加，不修改）"""
    __tablename__ = "program_versions"
    __table_args__ = (UniqueConstraint("program_id", "version_number", name="uq_program_version_number"),)

    id = Column(String(36), primary_key=True, default=new_id)
    program_id = Column(String(36), ForeignKey("nc_programs.id", ondelete="CASCADE"), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    revision = Column(String(32), nullable=False)
    file_path = Column(String(1024), nullable=False)
    change_log = Column(Text, nullable=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    program = relationship("NCProgram", back_populates="versions")
    created_by = relationship("User")
