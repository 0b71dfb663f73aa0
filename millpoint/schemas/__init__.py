"""API数据模型模块

定义所有 Pydantic 模型（请求/响应结构体）
"""

from .common import (
    ApiResponse,
    CamelModel,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    PageResponse,
    PaginationMeta,
)
from .user import LoginRequest, TokenRead, UserCreate, UserRead, UserRole, UserSummary
from .machine import (
    MachineCreate,
    MachineDetail,
    MachineProgramSummary,
    MachineRead,
    MachineStatus,
    MachineStatusUpdate,
    MachineSummary,
    MachineUpdate,
    NextProgramNumber,
)
from .setup_sheet import (
    FixtureIn,
    FixtureRead,
    MediaIn,
    MediaRead,
    MediaType,
    OriginOffsetIn,
    OriginOffsetRead,
    ProgramRef,
    SetupSheetApprove,
    SetupSheetCreate,
    SetupSheetDetail,
    SetupSheetRead,
    SetupSheetUpdate,
    ToolIn,
    ToolRead,
    UploadedMedia,
)
from .program import (
    ProgramCreate,
    ProgramDetail,
    ProgramQuery,
    ProgramRead,
    ProgramSortField,
    ProgramStatus,
    ProgramStatusUpdate,
    ProgramUpdate,
    ProgramVersionCreate,
    ProgramVersionRead,
    SortOrder,
)

__all__ = [
    "ApiResponse",
    "CamelModel",
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "PageResponse",
    "PaginationMeta",
    "LoginRequest",
    "TokenRead",
    "UserCreate",
    "UserRead",
    "UserRole",
    "UserSummary",
    "MachineCreate",
    "MachineDetail",
    "MachineProgramSummary",
    "MachineRead",
    "MachineStatus",
    "MachineStatusUpdate",
    "MachineSummary",
    "MachineUpdate",
    "NextProgramNumber",
    "FixtureIn",
    "FixtureRead",
    "MediaIn",
    "MediaRead",
    "MediaType",
    "OriginOffsetIn",
    "OriginOffsetRead",
    "ProgramRef",
    "SetupSheetApprove",
    "SetupSheetCreate",
    "SetupSheetDetail",
    "SetupSheetRead",
    "SetupSheetUpdate",
    "ToolIn",
    "ToolRead",
    "UploadedMedia",
    "ProgramCreate",
    "ProgramDetail",
    "ProgramQuery",
    "ProgramRead",
    "ProgramSortField",
    "ProgramStatus",
    "ProgramStatusUpdate",
    "ProgramUpdate",
    "ProgramVersionCreate",
    "ProgramVersionRead",
    "SortOrder",
]
