"""
Blog 后端入口
"""

import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy import select
from starlette.middleware.base import BaseHTTPMiddleware

from app.api import api_router
from app.core.celery_app import celery_app
from app.core.config import settings
from app.db.database import AsyncSessionLocal, engine, init_db
from app.models import User
from app.utils.cache import shutdown_cache

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


async def ensure_default_author() -> None:
    """文章接口不做认证，所有文章归属 DEFAULT_AUTHOR_ID；缺失时补建该作者"""
    author_id = settings.DEFAULT_AUTHOR_ID
    try:
        async with AsyncSessionLocal() as session:
            found = await session.execute(select(User.id).where(User.id == author_id))
            if found.scalar_one_or_none() is not None:
                return
            session.add(User(id=author_id, name="Blog Author", email=f"author{author_id}@blog.local"))
            await session.commit()
        logger.info(f"默认作者已创建: id={author_id}")
    except Exception as e:
        # 启动不因此失败，创建文章时会暴露问题
        logger.error(f"创建默认作者失败: {e}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} 启动中...")
    if settings.DEBUG or settings.AUTO_CREATE_TABLES:
        logger.info("自动建表（生产环境请使用 alembic upgrade head）")
        await init_db()
    await ensure_default_author()

    yield

    try:
        await shutdown_cache()
    except Exception as e:
        logger.error(f"缓存连接关闭失败: {e}")
    await engine.dispose()
    logger.info("应用已关闭")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """为每个请求分配 request id（写入日志上下文和响应头）并附加安全响应头"""

    async def dispatch(self, request, call_next):
        rid = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = rid
        with logger.contextualize(request_id=rid):
            response = await call_next(request)
        response.headers["X-Request-ID"] = rid
        for name, value in _SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


def _cors_options() -> Dict[str, Any]:
    # 开发模式放行本机任意端口
    if settings.DEBUG:
        origins: Dict[str, Any] = {"allow_origin_regex": r"^http://(localhost|127\.0\.0\.1)(:\d+)?$"}
    else:
        origins = {"allow_origins": [str(o) for o in settings.CORS_ORIGINS]}
    return {**origins, "allow_credentials": True, "allow_methods": ["*"], "allow_headers": ["*"]}


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="博客分类与文章 API",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

if settings.DEBUG or settings.CORS_ORIGINS:
    app.add_middleware(CORSMiddleware, **_cors_options())
app.add_middleware(RequestContextMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "health": f"{settings.API_V1_STR}/health",
        "docs": "/docs" if settings.DEBUG else None,
    }


# celery -A main.celery worker
celery = celery_app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.BACKEND_RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )
