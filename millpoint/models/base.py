"""模型公共部分：基类与主键生成"""

import uuid
from datetime import datetime

from ..database.connection import Base


def new_id() -> str:
    """UUID 字符串主键"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.utcnow()


__all__ = ["Base", "new_id", "utcnow"]
