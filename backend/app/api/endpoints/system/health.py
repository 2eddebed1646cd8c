"""
健康检查 API 端点
"""

from datetime import datetime
from typing import Dict, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text

from app.db.database import get_db
from app.core.config import settings
from app.utils.cache import cache

router = APIRouter()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    健康检查接口
    检查数据库和 Redis 缓存的连接状态
    """
    db_status = "healthy"
    try:
        result = await db.execute(text("SELECT 1"))
        db_status = "healthy" if result.scalar() == 1 else "unhealthy"
    except Exception:
        db_status = "unhealthy"

    if not settings.CACHE_ENABLED:
        redis_status = "disabled"
    else:
        redis_status = "healthy" if await cache.ping() else "unhealthy"

    if db_status != "healthy":
        overall_status = "unhealthy"
    elif redis_status == "unhealthy":
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return {
        "status": overall_status,
        "checks": {
            "database": db_status,
            "redis": redis_status,
        },
        "system": {
            "service": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "timestamp": datetime.now().isoformat(),
            "debug_mode": settings.DEBUG,
        },
    }


@router.get("/ping")
async def ping():
    """简单的 ping 接口，用于测试"""
    return {"message": "pong"}
