"""NC 程序数据结构定义

定义程序、程序版本以及列表查询相关的Pydantic模型
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .common import CamelModel, not_null
from .machine import MachineRead, MachineSummary
from .setup_sheet import SetupSheetRead
from .user import UserSummary


class ProgramStatus(str, Enum):
    draft = "Draft"
    in_review = "In Review"
    approved = "Approved"
    released = "Released"
    obsolete = "Obsolete"


class ProgramSortField(str, Enum):
    name = "name"
    part_number = "partNumber"
    last_modified = "lastModified"
    customer = "customer"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"


class ProgramCreate(CamelModel):
    """创建程序时的模型，partNumber 为空时按机床计数器自动编号"""
    name: str = Field(min_length=1)
    part_number: Optional[str] = None
    revision: str = Field(min_length=1)
    machine_id: str = Field(min_length=1)
    operation: str = Field(min_length=1)
    material: str = Field(min_length=1)
    customer: str = Field(min_length=1)
    work_order: Optional[str] = None
    description: Optional[str] = None
    status: ProgramStatus = ProgramStatus.draft
    nc_code: Optional[str] = None


class ProgramUpdate(CamelModel):
    """更新程序时的模型"""
    name: Optional[str] = Field(default=None, min_length=1)
    part_number: Optional[str] = Field(default=None, min_length=1)
    revision: Optional[str] = Field(default=None, min_length=1)
    machine_id: Optional[str] = Field(default=None, min_length=1)
    operation: Optional[str] = Field(default=None, min_length=1)
    material: Optional[str] = Field(default=None, min_length=1)
    customer: Optional[str] = Field(default=None, min_length=1)
    work_order: Optional[str] = None
    description: Optional[str] = None
    status: Optional[ProgramStatus] = None
    nc_code: Optional[str] = None

    @field_validator("name", "part_number", "revision", "machine_id", "operation", "material", "customer", "status")
    @classmethod
    def reject_null(cls, value):
        return not_null(value)


class ProgramStatusUpdate(CamelModel):
    status: ProgramStatus
    comments: Optional[str] = None


class ProgramQuery(BaseModel):
    """列表查询参数（路由层从 query string 组装）"""
    search: Optional[str] = None
    status: Optional[ProgramStatus] = None
    machine_id: Optional[str] = None
    customer: Optional[str] = None
    part_number: Optional[str] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=500)
    sort_by: ProgramSortField = ProgramSortField.last_modified
    sort_order: SortOrder = SortOrder.desc


class ProgramVersionCreate(CamelModel):
    revision: str = Field(min_length=1)
    change_log: Optional[str] = None
    nc_code: Optional[str] = None  # 缺省时使用程序当前的 ncCode


class ProgramVersionRead(CamelModel):
    id: str
    program_id: str
    version_number: int
    revision: str
    file_path: str
    change_log: Optional[str] = None
    created_by_id: str
    created_at: Optional[datetime] = None
    created_by: Optional[UserSummary] = None


class ProgramRead(CamelModel):
    """读取程序时的模型"""
    id: str
    name: str
    part_number: str
    revision: str
    machine_id: str
    operation: str
    material: str
    customer: str
    work_order: Optional[str] = None
    description: Optional[str] = None
    status: ProgramStatus
    author_id: str
    approver_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    nc_code: Optional[str] = None
    has_setup_sheet: bool
    last_modified: datetime
    created_at: Optional[datetime] = None
    author: Optional[UserSummary] = None
    machine: Optional[MachineSummary] = None


class ProgramDetail(ProgramRead):
    approver: Optional[UserSummary] = None
    machine: Optional[MachineRead] = None
    setup_sheets: List[SetupSheetRead] = []
    versions: List[ProgramVersionRead] = []
