"""
文章服务 - CRUD操作
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone
from sqlalchemy import select, desc, func
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.celery_app import dispatch_job
from app.models.blog import Category, Post
from app.schemas.blog import PostCreate, PostUpdate
from app.services.blog.slugs import make_slug_exists, commit_explicit_slug, commit_with_slug_retry
from app.tasks.blog import post_after_delete
from app.utils.slug import resolve_unique_slug_async, resolve_update_slug_async


class PostService:
    """文章服务类 - 提供文章的CRUD操作"""

    @staticmethod
    async def get_post_by_id(
        db: AsyncSession,
        post_id: int,
        with_deleted: bool = False,
        refresh: bool = False,
    ) -> Optional[Post]:
        """
        根据ID获取文章（默认不包含已软删除的文章）
        """
        query = select(Post).where(Post.id == post_id)
        if not with_deleted:
            query = query.where(Post.deleted_at.is_(None))
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_post_by_slug(db: AsyncSession, slug: str, published_only: bool = False) -> Optional[Post]:
        """
        根据slug获取文章
        """
        query = select(Post).where(Post.slug == slug, Post.deleted_at.is_(None))
        if published_only:
            query = query.where(Post.is_published.is_(True))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def _check_category(db: AsyncSession, category_id: int) -> None:
        result = await db.execute(
            select(Category.id).where(Category.id == category_id, Category.deleted_at.is_(None))
        )
        if result.scalar_one_or_none() is None:
            raise ValueError(f"分类ID {category_id} 不存在")

    @staticmethod
    async def create_post(db: AsyncSession, post_data: PostCreate, author_id: int) -> Post:
        """
        创建文章

        未提供slug时根据标题生成唯一slug；发布但未指定发布时间时取当前时间。
        """
        await PostService._check_category(db, post_data.category_id)

        explicit_slug = post_data.slug
        if explicit_slug and await make_slug_exists(db, Post)(explicit_slug):
            raise ValueError(f"slug '{explicit_slug}' 已存在")

        published_at = post_data.published_at
        if post_data.is_published and not published_at:
            published_at = datetime.now(timezone.utc)

        async def apply(slug: Optional[str]) -> Post:
            post = Post(
                title=post_data.title,
                slug=slug,
                excerpt=post_data.excerpt,
                content_raw=post_data.content_raw,
                content_html=post_data.content_html,
                category_id=post_data.category_id,
                author_id=author_id,
                is_published=post_data.is_published,
                published_at=published_at,
            )
            db.add(post)
            return post

        if explicit_slug:
            post = await apply(explicit_slug)
            await commit_explicit_slug(db, Post, explicit_slug)
        else:
            post = await commit_with_slug_retry(
                db,
                Post,
                resolve=lambda: resolve_unique_slug_async(post_data.title, make_slug_exists(db, Post)),
                apply=apply,
            )

        logger.info(f"文章已创建: id={post.id}, slug={post.slug}")
        return await PostService.get_post_by_id(db, post.id, refresh=True)

    @staticmethod
    async def update_post(
        db: AsyncSession,
        post_id: int,
        post_data: PostUpdate,
    ) -> Optional[Post]:
        """
        更新文章（仅更新显式提供的字段）

        slug 规则与分类一致：提供新标题且未提供slug时重新生成，
        新标题对应的slug与当前slug相同则保持不变。
        首次发布且文章没有发布时间时，发布时间取当前时间。
        """
        post = await PostService.get_post_by_id(db, post_id)
        if not post:
            return None
        current_slug = post.slug

        update_data: Dict[str, Any] = post_data.model_dump(exclude_unset=True)
        explicit_slug = update_data.pop("slug", None)

        # 非空字段显式传入 null 时忽略
        for key in ("title", "content_raw", "content_html", "category_id", "is_published"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)
        title = update_data.get("title")

        if "category_id" in update_data:
            await PostService._check_category(db, update_data["category_id"])

        if update_data.get("is_published") and not post.published_at and not update_data.get("published_at"):
            update_data["published_at"] = datetime.now(timezone.utc)

        if explicit_slug and explicit_slug != current_slug:
            if await make_slug_exists(db, Post, exclude_id=post_id)(explicit_slug):
                raise ValueError(f"slug '{explicit_slug}' 已存在")

        async def apply(slug: Optional[str]) -> Post:
            target = await PostService.get_post_by_id(db, post_id, refresh=True)
            for key, value in update_data.items():
                setattr(target, key, value)
            if slug is not None:
                target.slug = slug
            return target

        async def resolve() -> Optional[str]:
            if title is None:
                return None
            return await resolve_update_slug_async(
                title,
                current_slug,
                make_slug_exists(db, Post, exclude_id=post_id),
            )

        if explicit_slug:
            await apply(explicit_slug)
            await commit_explicit_slug(db, Post, explicit_slug)
        else:
            await commit_with_slug_retry(db, Post, resolve=resolve, apply=apply)

        return await PostService.get_post_by_id(db, post_id, refresh=True)

    @staticmethod
    async def delete_post(db: AsyncSession, post_id: int) -> bool:
        """
        软删除文章，并派发删除后的后台任务
        """
        post = await PostService.get_post_by_id(db, post_id)
        if not post:
            return False

        post.soft_delete()
        await db.commit()

        dispatch_job(post_after_delete, post_id)
        return True

    @staticmethod
    async def restore_post(db: AsyncSession, post_id: int) -> Optional[Post]:
        """
        恢复已软删除的文章
        """
        post = await PostService.get_post_by_id(db, post_id, with_deleted=True)
        if not post:
            return None
        if not post.is_deleted:
            return post

        if await make_slug_exists(db, Post, exclude_id=post_id, include_soft_deleted=False)(post.slug):
            raise ValueError(f"slug '{post.slug}' 已被其他文章占用，无法恢复")

        post.restore()
        await db.commit()
        return await PostService.get_post_by_id(db, post_id, refresh=True)

    @staticmethod
    async def list_posts(
        db: AsyncSession,
        page: int = 1,
        size: int = 20,
        published_only: bool = False,
        category_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        获取文章列表（支持分页和筛选，按创建时间倒序）
        """
        query = select(Post).where(Post.deleted_at.is_(None))

        if published_only:
            query = query.where(Post.is_published.is_(True))
        if category_id:
            query = query.where(Post.category_id == category_id)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(desc(Post.created_at), desc(Post.id))
        query = query.offset((page - 1) * size).limit(size)

        result = await db.execute(query)
        posts = list(result.scalars().all())

        total_pages = (total + size - 1) // size if total > 0 else 1

        return {
            "total": total,
            "posts": posts,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }
