"""
博客后台任务
- 文章删除后的通知
- 目录文件生成（按块拆分）
"""

import asyncio
import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.celery_app import celery_app, dispatch_job
from app.core.config import settings
from app.models.blog import Post


def _run(coro):
    return asyncio.run(coro)


@asynccontextmanager
async def _task_session():
    """任务专用会话：独立引擎，不与Web进程的连接池共享事件循环"""
    engine = create_async_engine(str(settings.DATABASE_URL), poolclass=NullPool)
    try:
        async with async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)() as session:
            yield session
    finally:
        await engine.dispose()


def _chunks(items: List[int], size: int) -> List[List[int]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


@celery_app.task(name="app.tasks.blog.post_after_delete")
def post_after_delete(post_id: int) -> Dict[str, Any]:
    logger.warning(f"博客文章已删除 [{post_id}]")
    return {"post_id": post_id}


async def _published_post_ids() -> List[int]:
    async with _task_session() as db:
        res = await db.execute(
            select(Post.id)
            .where(Post.is_published.is_(True), Post.deleted_at.is_(None))
            .order_by(Post.id)
        )
        return list(res.scalars().all())


@celery_app.task(name="app.tasks.blog.generate_catalog")
def generate_catalog() -> Dict[str, Any]:
    """生成目录：按 CATALOG_CHUNK_SIZE 拆分已发布文章，逐块派发生成任务"""
    post_ids = _run(_published_post_ids())
    chunks = _chunks(post_ids, settings.CATALOG_CHUNK_SIZE)
    logger.info(f"开始生成目录: {len(post_ids)} 篇文章, {len(chunks)} 个分块")
    for file_num, chunk in enumerate(chunks, start=1):
        dispatch_job(generate_catalog_chunk, chunk, file_num)
    return {"posts": len(post_ids), "chunks": len(chunks)}


async def _catalog_entries(post_ids: List[int]) -> List[Dict[str, Any]]:
    async with _task_session() as db:
        res = await db.execute(
            select(Post.id, Post.slug, Post.title).where(Post.id.in_(post_ids)).order_by(Post.id)
        )
        return [{"id": row.id, "slug": row.slug, "title": row.title} for row in res.all()]


@celery_app.task(name="app.tasks.blog.generate_catalog_chunk")
def generate_catalog_chunk(post_ids: List[int], file_num: int) -> Dict[str, Any]:
    logger.debug(f"processing chunk {file_num} with posts: {','.join(str(i) for i in post_ids)}")
    entries = _run(_catalog_entries(post_ids))

    out_dir = Path(settings.CATALOG_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"catalog_{file_num}.json"
    # 同名文件直接覆盖，重复投递时结果一致
    path.write_text(json.dumps(entries, ensure_ascii=False, indent=2), encoding="utf-8")

    logger.info(f"目录分块 {file_num} 已生成: {path}")
    return {"file_num": file_num, "path": str(path), "count": len(entries)}
