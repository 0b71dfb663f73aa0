"""安全模块：密码哈希与JWT令牌

- 使用 Passlib 管理密码哈希，优先采用 pbkdf2_sha256，兼容 bcrypt。
- 对于 bcrypt 的 72 字节限制，哈希前会做截断保护，避免运行时错误。
- 使用 python-jose 签发 / 校验访问令牌，subject 为用户 id。
"""

from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config.settings import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    """对明文密码进行哈希并返回哈希字符串。"""
    pw_bytes = password.encode("utf-8")
    if len(pw_bytes) > 72:
        password = pw_bytes[:72].decode("utf-8", errors="ignore")
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证明文密码与哈希是否匹配；无法识别的哈希视为验证失败。"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None,
                        secret_key: Optional[str] = None, algorithm: Optional[str] = None) -> str:
    """创建JWT访问令牌"""
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": subject, "exp": expire}
    return jwt.encode(payload, secret_key or settings.SECRET_KEY, algorithm=algorithm or settings.ALGORITHM)


def decode_access_token(token: str, secret_key: Optional[str] = None, algorithm: Optional[str] = None) -> Optional[str]:
    """验证JWT令牌，返回 subject；无效或过期返回 None"""
    try:
        payload = jwt.decode(token, secret_key or settings.SECRET_KEY, algorithms=[algorithm or settings.ALGORITHM])
    except JWTError:
        return None
    return payload.get("sub")
