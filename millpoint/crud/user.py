"""用户数据操作

定义对用户数据的增删改查操作
"""

from typing import Optional

from sqlalchemy.orm import Session

from ..models import User
from ..security import get_password_hash, verify_password


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """根据邮箱获取用户"""
    return db.query(User).filter(User.email == email.lower()).first()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    """根据ID获取用户"""
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, email: str, name: str, password: str, role: str = "programmer") -> User:
    """创建用户"""
    db_user = User(email=email.lower(), name=name, role=role, hashed_password=get_password_hash(password))
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_user_password(db: Session, db_user: User, new_password: str) -> User:
    """更新用户密码"""
    db_user.hashed_password = get_password_hash(new_password)
    db.commit()
    db.refresh(db_user)
    return db_user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """验证用户"""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
