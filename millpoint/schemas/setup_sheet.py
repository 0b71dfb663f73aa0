"""装夹单数据结构定义

刀具 / 原点 / 夹具 / 媒体 四类子集合与装夹单的请求、响应模型。
集合级规则（至少一把刀具、至少一个原点、名称非空）由 SetupSheetService 校验。
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, PositiveInt

from .common import CamelModel
from .machine import MachineSummary
from .user import UserSummary


class MediaType(str, Enum):
    image = "image"
    video = "video"


class ToolIn(CamelModel):
    tool_number: PositiveInt
    tool_name: str
    length: float
    offset_h: float
    offset_d: float
    comment: Optional[str] = None


class OriginOffsetIn(CamelModel):
    name: str  # G54, G55 ...
    x: float
    y: float
    z: float
    a: float = 0
    b: float = 0
    c: float = 0


class FixtureIn(CamelModel):
    fixture_id: str = Field(min_length=1)
    quantity: PositiveInt
    setup_description: Optional[str] = None


class MediaIn(CamelModel):
    type: MediaType
    url: str = ""  # 空 url 的条目在保存时被静默丢弃
    caption: Optional[str] = None
    annotations: List[str] = []
    order: Optional[int] = None  # 未指定时使用数组下标


class ToolRead(ToolIn):
    id: str
    tool_number: int


class OriginOffsetRead(OriginOffsetIn):
    id: str


class FixtureRead(FixtureIn):
    id: str
    quantity: int


class MediaRead(MediaIn):
    id: str
    order: int


class SetupSheetCreate(CamelModel):
    """创建装夹单时的模型"""
    program_id: str
    machine_id: str
    machine_type: Optional[str] = None  # 缺省时取机床类型
    tools: List[ToolIn] = Field(min_length=1)
    origin_offsets: List[OriginOffsetIn] = Field(min_length=1)
    fixtures: List[FixtureIn] = []
    media: List[MediaIn] = Field(default=[], max_length=10)
    safety_checklist: List[str] = []


class SetupSheetUpdate(CamelModel):
    """更新装夹单：出现在请求中的集合会被整体替换"""
    machine_type: Optional[str] = Field(default=None, min_length=1)
    tools: Optional[List[ToolIn]] = None
    origin_offsets: Optional[List[OriginOffsetIn]] = None
    fixtures: Optional[List[FixtureIn]] = None
    media: Optional[List[MediaIn]] = None
    safety_checklist: Optional[List[str]] = None


class SetupSheetApprove(CamelModel):
    approved: bool
    comments: Optional[str] = None


class ProgramRef(CamelModel):
    id: str
    name: str
    part_number: str
    revision: str


class SetupSheetRead(CamelModel):
    """读取装夹单时的模型"""
    id: str
    program_id: str
    machine_id: str
    machine_type: str
    safety_checklist: List[str] = []
    created_by_id: str
    approved_by_id: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tools: List[ToolRead] = []
    origin_offsets: List[OriginOffsetRead] = []
    fixtures: List[FixtureRead] = []
    media: List[MediaRead] = []
    created_by: Optional[UserSummary] = None
    approved_by: Optional[UserSummary] = None
    machine: Optional[MachineSummary] = None


class SetupSheetDetail(SetupSheetRead):
    program: Optional[ProgramRef] = None


class UploadedMedia(CamelModel):
    id: str
    type: MediaType
    url: str
    caption: Optional[str] = None
    filename: str
    size: int
    mimetype: str
