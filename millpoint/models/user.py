"""用户表模型

定义用户相关的数据模型
"""

from sqlalchemy import Column, DateTime, Enum, String
from sqlalchemy.sql import func

from .base import Base, new_id

USER_ROLES = ("programmer", "quality", "operator", "admin")


class User(Base):
    """用户表"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    role = Column(Enum(*USER_ROLES, name="user_role"), nullable=False, default="programmer")
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
