"""用户数据结构定义

定义用户相关的Pydantic模型
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field

from .common import CamelModel


class UserRole(str, Enum):
    programmer = "programmer"
    quality = "quality"
    operator = "operator"
    admin = "admin"


class UserSummary(CamelModel):
    """嵌入在程序、装夹单中的用户摘要"""
    id: str
    name: str
    email: str


class UserRead(UserSummary):
    """读取用户时的模型"""
    role: UserRole
    created_at: Optional[datetime] = None


class UserCreate(CamelModel):
    """创建用户时的模型"""
    email: EmailStr
    name: str = Field(min_length=1)
    password: str = Field(min_length=6)
    role: UserRole = UserRole.programmer


class LoginRequest(CamelModel):
    """用户登录模型"""
    email: EmailStr
    password: str


class TokenRead(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
