"""数据库连接模块

统一管理数据库引擎、会话和模型基类的创建。
引擎不再在导入时创建：由 Database 对象显式 open()/close()，
在应用启动时构造并注入各个服务。
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

# 创建模型基类
Base = declarative_base()


class Database:
    """数据库生命周期管理（引擎 + 会话工厂）"""

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self.engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    def open(self) -> "Database":
        if self.engine is not None:
            return self
        connect_args = {"check_same_thread": False, "timeout": 30} if self.is_sqlite else {}
        self.engine = create_engine(
            self.url,
            pool_pre_ping=True,
            echo=self.echo,
            connect_args=connect_args,
        )
        if self.is_sqlite:
            # SQLite 默认不启用外键约束
            @event.listens_for(self.engine, "connect")
            def _set_sqlite_pragma(dbapi_conn, _):
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        logger.info("Database opened: %s", self.engine.url.render_as_string(hide_password=True))
        return self

    def close(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            logger.info("Database closed")
        self.engine = None
        self._session_factory = None

    def create_all(self) -> None:
        """创建全部表（开发环境 / 测试使用，生产环境走 alembic）"""
        from .. import models  # noqa: F401  注册模型到 Base.metadata

        Base.metadata.create_all(bind=self._require_engine())

    def drop_all(self) -> None:
        from .. import models  # noqa: F401

        Base.metadata.drop_all(bind=self._require_engine())

    def ping(self) -> bool:
        with self._require_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    def session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database is not open")
        return self._session_factory()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """短事务：成功提交，异常回滚"""
        db = self.session()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("Database is not open")
        return self.engine
