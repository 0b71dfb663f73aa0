"""
数据库模块入口

此模块作为数据库相关功能的统一入口，实际功能在database包中实现
"""

from typing import Iterator

from fastapi import Request
from sqlalchemy.orm import Session

from .database.connection import Base, Database


def get_db(request: Request) -> Iterator[Session]:
    """获取数据库会话的依赖函数（数据库对象由应用启动时注入 app.state）"""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()


__all__ = ["Base", "Database", "get_db"]
