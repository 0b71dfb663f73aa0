"""路由依赖：从 app.state 取出启动时创建的服务对象"""

from fastapi import Request

from ..services import MachineService, ProgramService, SetupSheetService
from ..utils.file_storage import FileStorage


def get_machine_service(request: Request) -> MachineService:
    return request.app.state.machine_service


def get_program_service(request: Request) -> ProgramService:
    return request.app.state.program_service


def get_setup_sheet_service(request: Request) -> SetupSheetService:
    return request.app.state.setup_sheet_service


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage
