"""
Celery 异步任务配置
"""

from celery import Celery
from loguru import logger

from app.core.config import settings

# 创建 Celery 应用实例
celery_app = Celery(
    "blog",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer=settings.CELERY_TASK_SERIALIZER,
    result_serializer=settings.CELERY_RESULT_SERIALIZER,
    accept_content=settings.CELERY_ACCEPT_CONTENT,
    timezone=settings.TIMEZONE,
    enable_utc=True,
    broker_connection_retry_on_startup=True,
    # 至少一次投递：任务执行完成后才确认
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_routes={
        "app.tasks.blog.generate_catalog": {"queue": "generate-catalog"},
        "app.tasks.blog.generate_catalog_chunk": {"queue": "generate-catalog"},
    },
    include=["app.tasks.blog"],
)


def dispatch_job(task, *args):
    """
    派发后台任务

    BLOG_JOBS_USE_CELERY 为真时投递到消息队列，否则在当前进程内同步执行。
    """
    if settings.BLOG_JOBS_USE_CELERY:
        return task.delay(*args)
    logger.debug(f"后台任务在进程内执行: {task.name}")
    return task.apply(args=args)
