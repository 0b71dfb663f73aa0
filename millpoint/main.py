"""FastAPI主应用入口

NC 程序、机床与装夹单管理 REST API
- 数据库、搜索客户端、文件存储在 create_app 中显式构造，生命周期内 open / close
- 服务对象挂在 app.state 上，通过依赖注入传给路由
- 所有响应统一为 {success, data | error, message?, meta?}
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import auth_router, files_router, machines_router, programs_router, setup_sheets_router
from .config.settings import Settings, settings as default_settings
from .core.numbering import KeyedLocks
from .database.connection import Database
from .errors import AppError
from .logging_config import configure_logging, reset_request_id, set_request_id
from .services import MachineService, ProgramService, SearchClient, SearchIndexer, SetupSheetService
from .utils.file_storage import FileStorage

logger = logging.getLogger(__name__)

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie"}


def _error_path(loc) -> str:
    parts = list(loc)
    if parts and parts[0] in _LOCATION_PREFIXES:
        parts = parts[1:]
    return ".".join(str(p) for p in parts)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [{"path": _error_path(err.get("loc", ())), "message": err.get("msg", "")} for err in exc.errors()]
        return JSONResponse(status_code=400, content={"success": False, "error": "Validation failed", "details": details})

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        content = {"success": False, "error": exc.message}
        if exc.code:
            content["code"] = exc.code
        if exc.details:
            content["details"] = exc.details
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            content = {"success": False, "error": "Resource not found", "path": request.url.path}
        else:
            content = {"success": False, "error": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        content = {"success": False, "error": "Database operation failed", "code": "INTEGRITY_ERROR"}
        if not settings.is_production:
            content["message"] = str(exc.orig)
        return JSONResponse(status_code=400, content=content)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"success": False, "error": "Internal server error"}
        if not settings.is_production:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    search_client: Optional[SearchClient] = None,
    storage: Optional[FileStorage] = None,
) -> FastAPI:
    """构造应用；测试时可传入自定义的配置、数据库、搜索客户端与存储"""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    database = database or Database(settings.DATABASE_URL, echo=settings.ECHO_SQL)
    search_client = search_client or SearchClient(
        host=settings.MEILISEARCH_HOST,
        api_key=settings.MEILISEARCH_API_KEY,
        index_name=settings.SEARCH_INDEX_NAME,
        timeout=settings.SEARCH_TIMEOUT_SECONDS,
    )
    storage = storage or FileStorage(settings.STORAGE_PATH)
    indexer = SearchIndexer(
        search_client,
        retry_attempts=settings.SEARCH_RETRY_ATTEMPTS,
        backoff_seconds=settings.SEARCH_RETRY_BACKOFF_SECONDS,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        database.create_all()
        storage.open()
        search_client.open()
        indexer.start()
        logger.info("%s started (env=%s)", settings.APP_TITLE, settings.APP_ENV)
        try:
            yield
        finally:
            indexer.stop()
            search_client.close()
            storage.close()
            database.close()
            logger.info("%s stopped", settings.APP_TITLE)

    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.search_client = search_client
    app.state.indexer = indexer
    app.state.storage = storage
    app.state.machine_service = MachineService(database)
    locks = KeyedLocks()
    app.state.program_service = ProgramService(database, search_client, indexer, storage, locks)
    app.state.setup_sheet_service = SetupSheetService(database, storage, settings, locks)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.CORS_ORIGIN.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        token = set_request_id(rid)
        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = rid
            if settings.is_development:
                logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path,
                            response.status_code, (time.perf_counter() - start) * 1000)
            return response
        finally:
            reset_request_id(token)

    register_exception_handlers(app, settings)

    # 挂载API路由
    for router in (auth_router, machines_router, programs_router, setup_sheets_router, files_router):
        app.include_router(router, prefix="/api")

    @app.get("/health")
    def health():
        return {"status": "ok", "timestamp": datetime.utcnow().isoformat(), "environment": settings.APP_ENV}

    @app.get("/health/db")
    def health_db():
        try:
            database.ping()
        except SQLAlchemyError as exc:
            logger.error("Database health check failed: %s", exc)
            return JSONResponse(status_code=503, content={"status": "error", "database": "unreachable"})
        return {"status": "ok", "database": "connected"}

    return app


app = create_app()
