"""数据库模型模块

定义所有 SQLAlchemy ORM 模型
"""

from .base import Base
from .user import User, USER_ROLES
from .machine import Machine, MACHINE_STATUSES, DEFAULT_NEXT_PROGRAM_NUMBER
from .program import NCProgram, ProgramVersion, PROGRAM_STATUSES
from .setup_sheet import SetupSheet, Tool, OriginOffset, Fixture, Media, MEDIA_TYPES

__all__ = [
    "Base",
    "User",
    "Machine",
    "NCProgram",
    "ProgramVersion",
    "SetupSheet",
    "Tool",
    "OriginOffset",
    "Fixture",
    "Media",
    "USER_ROLES",
    "MACHINE_STATUSES",
    "PROGRAM_STATUSES",
    "MEDIA_TYPES",
    "DEFAULT_NEXT_PROGRAM_NUMBER",
]
