"""认证模块

写操作必须携带 Bearer 令牌；解析出的 User 作为操作人显式传给服务层。
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from . import crud
from .db import get_db
from .errors import AuthenticationError
from .models import User
from .security import create_access_token, decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


def issue_token(request: Request, user: User) -> str:
    settings = request.app.state.settings
    return create_access_token(user.id, secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """解析 Authorization 头并返回当前用户"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Authentication required")
    settings = request.app.state.settings
    user_id = decode_access_token(credentials.credentials, secret_key=settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    if not user_id:
        raise AuthenticationError("Invalid or expired token")
    user = crud.get_user_by_id(db, user_id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    # 与请求会话分离，服务层只读取 id / 名称
    db.expunge(user)
    return user
