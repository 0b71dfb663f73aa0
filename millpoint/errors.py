"""业务异常定义

服务层抛出带状态码的异常，由 main.py 中注册的异常处理器统一转换为
{success: false, error, details?, code?} 格式的 JSON 响应。
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """应用异常基类"""

    status_code = 500
    code: Optional[str] = None

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details


class ValidationError(AppError):
    """输入不合法（字段级明细放在 details 中）"""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message, details=details or [])


class AuthenticationError(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    """业务规则冲突，例如删除仍被程序引用的机床"""

    status_code = 400
    code = "CONFLICT"


class StorageError(AppError):
    """文件读写失败；读取不存在的文件时由调用方指定 404"""

    status_code = 500
    code = "STORAGE_ERROR"


class UpstreamIndexError(AppError):
    """搜索引擎不可用。只在搜索模块内部使用，不会返回给调用方"""

    status_code = 503
    code = "SEARCH_UNAVAILABLE"
