"""机床数据结构定义

定义机床相关的Pydantic模型
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .common import CamelModel, not_null


class MachineStatus(str, Enum):
    online = "Online"
    offline = "Offline"
    maintenance = "Maintenance"


class MachineBase(CamelModel):
    """机床基础模型"""
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    status: MachineStatus = MachineStatus.offline
    ip_address: Optional[str] = None
    serial_port: Optional[str] = None
    capabilities: Optional[Dict[str, Any]] = None


class MachineCreate(MachineBase):
    """创建机床时的模型"""
    pass


class MachineUpdate(CamelModel):
    """更新机床时的模型（只更新请求中出现的字段）"""
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1)
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    status: Optional[MachineStatus] = None
    ip_address: Optional[str] = None
    serial_port: Optional[str] = None
    capabilities: Optional[Dict[str, Any]] = None

    @field_validator("name", "type", "status")
    @classmethod
    def reject_null(cls, value):
        return not_null(value)


class MachineStatusUpdate(CamelModel):
    status: MachineStatus


class MachineSummary(CamelModel):
    id: str
    name: str
    type: str


class MachineProgramSummary(CamelModel):
    """机床详情中列出的程序"""
    id: str
    name: str
    part_number: str
    status: str


class MachineRead(MachineBase):
    """读取机床时的模型"""
    id: str
    status: MachineStatus
    next_program_number: int
    program_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MachineDetail(MachineRead):
    programs: List[MachineProgramSummary] = []


class NextProgramNumber(CamelModel):
    """下一个自动编号预览（不消耗计数器）"""
    next: int
    formatted: str
