"""
数据库配置和连接管理
SQLAlchemy 异步引擎和会话管理
"""

from typing import Any, AsyncGenerator, Dict
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import settings


class Base(DeclarativeBase):
    """SQLAlchemy 基类"""
    pass


# 确保 DATABASE_URL 不为 None
if not settings.DATABASE_URL:
    raise ValueError("DATABASE_URL 未配置。请检查 .env 文件中的数据库配置。")


def _engine_options(url: str) -> Dict[str, Any]:
    """根据数据库方言生成引擎参数"""
    if url.startswith("sqlite"):
        # SQLite 仅用于本地开发和测试；每次会话使用独立连接
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.POSTGRES_MAX_CONNECTIONS,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT_SECONDS,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "client_encoding": "utf8",
                "statement_timeout": str(settings.POSTGRES_STATEMENT_TIMEOUT),
            }
        },
    }


# 创建异步引擎
engine = create_async_engine(
    str(settings.DATABASE_URL),
    echo=settings.SQLALCHEMY_ECHO,
    **_engine_options(str(settings.DATABASE_URL)),
)

# 创建异步会话工厂
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话的依赖函数
    在 FastAPI 依赖注入中使用
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    创建所有表（仅开发环境/测试使用）

    生产环境请使用 Alembic 迁移。
    """
    from app.models import Base as ModelsBase

    async with engine.begin() as conn:
        await conn.run_sync(ModelsBase.metadata.create_all)


async def close_db() -> None:
    """关闭数据库连接"""
    await engine.dispose()
