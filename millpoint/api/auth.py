"""认证API路由"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from .. import crud, schemas
from ..auth import get_current_user, issue_token
from ..db import get_db
from ..errors import AuthenticationError
from ..models import User

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=schemas.ApiResponse[schemas.TokenRead])
def login(payload: schemas.LoginRequest, request: Request, db: Session = Depends(get_db)):
    """邮箱 + 密码登录，返回访问令牌"""
    user = crud.authenticate_user(db, payload.email, payload.password)
    if not user:
        raise AuthenticationError("Invalid email or password")
    token = issue_token(request, user)
    return {
        "success": True,
        "data": schemas.TokenRead(access_token=token, user=schemas.UserRead.model_validate(user)),
    }


@router.get("/me", response_model=schemas.ApiResponse[schemas.UserRead])
def read_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": schemas.UserRead.model_validate(current_user)}
