"""应用配置模块

使用 Pydantic Settings 管理应用配置，支持从 .env 文件加载环境变量
"""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置类"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # 应用配置
    APP_TITLE: str = "MillPoint NC API"
    APP_DESCRIPTION: str = "NC 程序、机床与装夹单管理系统 API"
    APP_VERSION: str = "1.0.0"
    # development / production / test，兼容旧部署中的 NODE_ENV
    APP_ENV: str = Field(default="development", validation_alias=AliasChoices("APP_ENV", "NODE_ENV"))
    LOG_LEVEL: str = "INFO"

    # HTTP 服务
    PORT: int = 3001
    CORS_ORIGIN: str = "http://localhost:5173"

    # JWT配置
    SECRET_KEY: str = "change-me-in-production"  # 生产环境务必通过环境变量设置
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # 数据库配置 - 未设置时使用本地 SQLite
    DATABASE_URL: str = ""
    ECHO_SQL: bool = False  # 是否打印SQL日志

    # 文件存储根目录（nc/cad/dxf/media/documents/versions）
    STORAGE_PATH: str = "./storage"
    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024
    MAX_UPLOAD_FILES: int = 10

    # 搜索引擎（Meilisearch 兼容接口），HOST 为空时禁用搜索
    MEILISEARCH_HOST: str = ""
    MEILISEARCH_API_KEY: str = ""
    SEARCH_INDEX_NAME: str = "programs"
    SEARCH_TIMEOUT_SECONDS: float = 5.0
    SEARCH_RETRY_ATTEMPTS: int = 3
    SEARCH_RETRY_BACKOFF_SECONDS: float = 0.5

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.DATABASE_URL:
            self.DATABASE_URL = "sqlite:///./dev.db"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.APP_ENV.lower() == "development"


# 创建全局配置实例
settings = Settings()
