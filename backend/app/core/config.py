"""
应用配置管理
从环境变量加载配置，提供类型安全的配置访问
"""

import json
from pathlib import Path
from typing import List, Optional, Union
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]


class Settings(BaseSettings):
    """应用配置类，从环境变量加载所有配置"""

    # ==================== 项目信息 ====================
    PROJECT_NAME: str = Field(default="Blog")
    VERSION: str = Field(default="1.0.0")
    API_V1_STR: str = Field(default="/api/v1")

    # ==================== 服务器配置 ====================
    BACKEND_HOST: str = Field(default="0.0.0.0")
    BACKEND_PORT: int = Field(default=8000)
    BACKEND_RELOAD: bool = Field(default=True)  # 开发模式热重载

    # ==================== 安全配置 ====================
    SECRET_KEY: str = Field(default="change_me")

    # ==================== 调试配置 ====================
    DEBUG: bool = Field(default=True)
    LOG_LEVEL: str = Field(default="INFO")

    # ==================== CORS 配置 ====================
    CORS_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://127.0.0.1:3000"])

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """解析CORS_ORIGINS，支持JSON字符串或列表"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==================== 数据库配置 ====================
    POSTGRES_USER: str = Field(default="blog")
    POSTGRES_PASSWORD: str = Field(default="change_me")
    POSTGRES_DB: str = Field(default="blog_db")
    POSTGRES_HOST: str = Field(default="127.0.0.1")
    POSTGRES_PORT: str = Field(default="5432")
    POSTGRES_MAX_CONNECTIONS: int = Field(default=20)
    DB_MAX_OVERFLOW: int = Field(default=20)
    DB_POOL_TIMEOUT_SECONDS: int = Field(default=30)
    POSTGRES_STATEMENT_TIMEOUT: int = Field(default=30000)
    DATABASE_DRIVER: str = Field(default="asyncpg")

    # 数据库URL - 优先使用环境变量中的值
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info) -> Optional[str]:
        """构建数据库连接 URL"""
        if v:
            return v

        # 从各个组件构建
        values = info.data
        driver = values.get("DATABASE_DRIVER", "asyncpg")
        username = values.get("POSTGRES_USER")
        password = values.get("POSTGRES_PASSWORD")
        host = values.get("POSTGRES_HOST")
        port = values.get("POSTGRES_PORT")
        db = values.get("POSTGRES_DB")

        if all([driver, username, password, host, port, db]):
            return f"postgresql+{driver}://{username}:{password}@{host}:{port}/{db}"
        return None

    # ==================== Redis 配置 ====================
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379)
    REDIS_CONNECT_TIMEOUT: int = Field(default=5)               # 连接超时秒数
    REDIS_DB_CACHE: int = Field(default=1)                      # 缓存数据库索引

    REDIS_URL: str = Field(default="redis://${REDIS_HOST}:${REDIS_PORT}/0", validate_default=True)

    # ==================== Celery 配置 ====================
    CELERY_BROKER_URL: str = Field(default="${REDIS_URL}", validate_default=True)
    CELERY_RESULT_BACKEND: str = Field(default="${REDIS_URL}", validate_default=True)
    CELERY_TASK_SERIALIZER: str = Field(default="json")
    CELERY_RESULT_SERIALIZER: str = Field(default="json")
    CELERY_ACCEPT_CONTENT: List[str] = Field(default=["json"])

    @field_validator("REDIS_URL", mode="before")
    @classmethod
    def replace_redis_url_variables(cls, v: str, info) -> str:
        """替换Redis URL中的HOST和PORT变量"""
        if v and "${REDIS_HOST}" in v and "${REDIS_PORT}" in v:
            values = info.data
            host = values.get("REDIS_HOST")
            port = values.get("REDIS_PORT")
            if host and port:
                return v.replace("${REDIS_HOST}", host).replace("${REDIS_PORT}", str(port))
        return v

    @field_validator("CELERY_BROKER_URL", "CELERY_RESULT_BACKEND", mode="before")
    @classmethod
    def replace_celery_redis_variables(cls, v: str, info) -> str:
        """替换Celery URL中的REDIS_URL变量"""
        if v and "${REDIS_URL}" in v:
            redis_url = info.data.get("REDIS_URL")
            if redis_url:
                return v.replace("${REDIS_URL}", redis_url)
        return v

    @field_validator("CELERY_ACCEPT_CONTENT", mode="before")
    @classmethod
    def parse_celery_accept_content(cls, v: Union[str, List[str]]) -> List[str]:
        """解析CELERY_ACCEPT_CONTENT"""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    # ==================== 数据库调试配置 ====================
    SQLALCHEMY_ECHO: bool = Field(default=False)
    AUTO_CREATE_TABLES: bool = Field(default=False)

    # ==================== 时区配置 ====================
    TIMEZONE: str = Field(default="Europe/Kyiv")

    # ==================== 博客相关配置 ====================
    # 缓存配置
    CACHE_ENABLED: bool = Field(default=True)
    BLOG_CACHE_PUBLIC_DETAIL_TTL: int = Field(default=600)      # 公开详情10分钟

    # 分页配置
    POST_PAGE_SIZE_DEFAULT: int = Field(default=20)
    POST_PAGE_SIZE_MAX: int = Field(default=100)
    CATEGORY_PAGE_SIZE_DEFAULT: int = Field(default=20)
    CATEGORY_PAGE_SIZE_MAX: int = Field(default=100)

    # slug 生成
    SLUG_INCLUDE_SOFT_DELETED: bool = Field(default=True)       # 软删除记录是否继续占用slug
    SLUG_MAX_ATTEMPTS: int = Field(default=3, ge=1)             # 唯一约束冲突时的最大尝试次数

    # 无认证模式下文章的默认作者
    DEFAULT_AUTHOR_ID: int = Field(default=2)

    # ==================== 后台任务配置 ====================
    BLOG_JOBS_USE_CELERY: bool = Field(default=False)
    CATALOG_CHUNK_SIZE: int = Field(default=100, ge=1)
    CATALOG_DIR: str = Field(default="./data/catalog")

    @model_validator(mode="after")
    def validate_security_settings(self):
        if "POSTGRES_MAX_CONNECTIONS" not in self.model_fields_set:
            self.POSTGRES_MAX_CONNECTIONS = 20 if self.DEBUG else 50
        if "DB_MAX_OVERFLOW" not in self.model_fields_set:
            self.DB_MAX_OVERFLOW = 10 if self.DEBUG else 20

        if self.DEBUG:
            return self

        def must_set(name: str, value: str):
            if not value or str(value).strip() in {"", "change_me"}:
                raise ValueError(f"{name} 未配置或仍为默认值，请在 .env 中设置为安全值")

        must_set("SECRET_KEY", self.SECRET_KEY)
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgresql"):
            must_set("POSTGRES_PASSWORD", self.POSTGRES_PASSWORD)

        return self

    class Config:
        env_file = str(PROJECT_ROOT / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False  # 环境变量不区分大小写
        extra = "ignore"  # 忽略额外的环境变量


# 创建全局配置实例
settings = Settings()
