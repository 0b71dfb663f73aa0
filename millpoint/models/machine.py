"""机床数据库模型"""

from sqlalchemy import JSON, Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base, new_id, utcnow

MACHINE_STATUSES = ("Online", "Offline", "Maintenance")
DEFAULT_NEXT_PROGRAM_NUMBER = 100


class Machine(Base):
    """机床表"""
    __tablename__ = "machines"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(255), nullable=False)  # 机床类型（铣床、车床、EDM…）
    manufacturer = Column(String(255), nullable=True)
    model = Column(String(255), nullable=True)
    status = Column(Enum(*MACHINE_STATUSES, name="machine_status"), nullable=False, default="Offline")
    ip_address = Column(String(64), nullable=True)
    serial_port = Column(String(64), nullable=True)
    capabilities = Column(JSON, nullable=True)
    # 自动编号计数器：每消费一次 +1，不回收、不回退
    next_program_number = Column(Integer, nullable=False, default=DEFAULT_NEXT_PROGRAM_NUMBER)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # 删除机床前由服务层检查程序引用，这里不做级联
    programs = relationship("NCProgram", back_populates="machine")
