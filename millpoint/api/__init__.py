from .auth import router as auth_router
from .files import router as files_router
from .machines import router as machines_router
from .programs import router as programs_router
from .setup_sheets import router as setup_sheets_router

__all__ = ["auth_router", "machines_router", "programs_router", "setup_sheets_router", "files_router"]
