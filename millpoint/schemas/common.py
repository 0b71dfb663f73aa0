"""公共数据结构：驼峰字段基类与统一响应信封"""

from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def not_null(value):
    """部分更新：字段可以省略，但不能显式传 null"""
    if value is None:
        raise ValueError("Field cannot be null")
    return value


class CamelModel(BaseModel):
    """对外字段统一使用 camelCase，内部使用 snake_case"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class ApiResponse(BaseModel, Generic[T]):
    """成功响应信封"""
    success: bool = True
    data: T
    message: Optional[str] = None


class PageResponse(BaseModel, Generic[T]):
    """分页响应信封"""
    success: bool = True
    data: List[T]
    meta: PaginationMeta


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class ErrorDetail(BaseModel):
    path: str
    message: str


class ErrorResponse(BaseModel):
    """失败响应信封（仅用于文档）"""
    success: bool = False
    error: str
    details: Optional[Any] = None
    code: Optional[str] = None
