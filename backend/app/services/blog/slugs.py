"""
slug 唯一性探测与带重试的写入
"""

from typing import Awaitable, Callable, Optional, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.config import settings
from app.models.blog import Category, Post
from app.utils.slug import AsyncSlugExists, SlugConflictError

SluggedModel = Union[Type[Category], Type[Post]]
T = TypeVar("T")


def make_slug_exists(
    db: AsyncSession,
    model: SluggedModel,
    exclude_id: Optional[int] = None,
    include_soft_deleted: Optional[bool] = None,
) -> AsyncSlugExists:
    """
    构造 "集合中是否已有该slug" 的异步探测函数

    exclude_id: 更新时排除的记录ID（自身的slug不算冲突）
    include_soft_deleted: 软删除记录是否继续占用slug，None 时读取配置
    """
    if include_soft_deleted is None:
        include_soft_deleted = settings.SLUG_INCLUDE_SOFT_DELETED

    async def exists(candidate: str) -> bool:
        query = select(model.id).where(model.slug == candidate)
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)
        if not include_soft_deleted:
            query = query.where(model.deleted_at.is_(None))
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    return exists


def is_slug_violation(exc: IntegrityError, model: SluggedModel) -> bool:
    """
    是否为 slug 唯一索引冲突

    PostgreSQL 报告索引名 uq_<表名>_slug_active，SQLite 报告 "<表名>.slug"。
    """
    table = model.__tablename__
    message = str(exc.orig)
    return f"uq_{table}_slug_active" in message or f"{table}.slug" in message


async def commit_explicit_slug(db: AsyncSession, model: SluggedModel, slug: str) -> None:
    """提交使用显式slug的写入；slug 冲突转为 ValueError，其他约束错误原样抛出"""
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if is_slug_violation(e, model):
            raise ValueError(f"slug '{slug}' 已存在")
        raise


async def commit_with_slug_retry(
    db: AsyncSession,
    model: SluggedModel,
    resolve: Callable[[], Awaitable[Optional[str]]],
    apply: Callable[[Optional[str]], Awaitable[T]],
) -> T:
    """
    解析slug -> 写入 -> 提交

    先探测后写入之间存在竞争窗口：并发请求可能解析出相同的slug。
    依赖数据库唯一索引兜底，提交时遇到 slug 唯一索引冲突则回滚并重新解析，
    最多尝试 SLUG_MAX_ATTEMPTS 次；其他完整性错误（外键、非空等）直接抛出。
    """
    max_attempts = settings.SLUG_MAX_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        slug = await resolve()
        obj = await apply(slug)
        try:
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            if not is_slug_violation(e, model):
                raise
            logger.warning(f"slug '{slug}' 写入时发生唯一约束冲突，重试 {attempt}/{max_attempts}")
            continue
        return obj

    raise SlugConflictError(f"无法生成唯一slug，已尝试 {max_attempts} 次")
