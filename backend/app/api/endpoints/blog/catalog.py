"""
目录生成 API 端点
"""

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, status

from app.core.celery_app import dispatch_job
from app.core.config import settings
from app.tasks.blog import generate_catalog

router = APIRouter()


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def prepare_catalog() -> Dict[str, Any]:
    """
    派发目录生成任务
    """
    # 进程内执行时任务内部会启动自己的事件循环，需放到线程中运行
    result = await asyncio.to_thread(dispatch_job, generate_catalog)
    return {
        "job_id": result.id,
        "queued": settings.BLOG_JOBS_USE_CELERY,
    }
