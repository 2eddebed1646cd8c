"""
分类服务 - CRUD操作
"""

from typing import Optional, Dict, Any
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.models.blog import Category
from app.schemas.blog import CategoryCreate, CategoryUpdate
from app.services.blog.slugs import make_slug_exists, commit_explicit_slug, commit_with_slug_retry
from app.utils.slug import resolve_unique_slug_async, resolve_update_slug_async


def _with_parent(query):
    """响应中的 parent_title 依赖父分类，需随查询一并加载"""
    return query.options(selectinload(Category.parent))


class CategoryService:
    """分类服务类 - 提供分类的CRUD操作"""

    @staticmethod
    async def get_category_by_id(
        db: AsyncSession,
        category_id: int,
        with_deleted: bool = False,
        refresh: bool = False,
    ) -> Optional[Category]:
        """
        根据ID获取分类（默认不包含已软删除的分类）
        """
        query = _with_parent(select(Category).where(Category.id == category_id))
        if not with_deleted:
            query = query.where(Category.deleted_at.is_(None))
        if refresh:
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_category_by_slug(db: AsyncSession, slug: str) -> Optional[Category]:
        """
        根据slug获取分类
        """
        result = await db.execute(
            _with_parent(select(Category).where(Category.slug == slug, Category.deleted_at.is_(None)))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def _check_parent(
        db: AsyncSession,
        parent_id: Optional[int],
        category_id: Optional[int] = None,
    ) -> Optional[int]:
        """校验父分类：0 视为无父分类；父分类必须存在且不能是自身"""
        if not parent_id:
            return None
        if category_id is not None and parent_id == category_id:
            raise ValueError("分类不能以自身作为父分类")
        parent = await CategoryService.get_category_by_id(db, parent_id)
        if not parent:
            raise ValueError(f"父分类ID {parent_id} 不存在")
        return parent_id

    @staticmethod
    async def create_category(db: AsyncSession, category_data: CategoryCreate) -> Category:
        """
        创建分类

        未提供slug时根据标题生成唯一slug；显式提供的slug必须未被占用，且不会被自动修改。
        """
        parent_id = await CategoryService._check_parent(db, category_data.parent_id)

        explicit_slug = category_data.slug
        if explicit_slug and await make_slug_exists(db, Category)(explicit_slug):
            raise ValueError(f"slug '{explicit_slug}' 已存在")

        async def apply(slug: Optional[str]) -> Category:
            category = Category(
                title=category_data.title,
                slug=slug,
                description=category_data.description,
                parent_id=parent_id,
            )
            db.add(category)
            return category

        if explicit_slug:
            category = await apply(explicit_slug)
            await commit_explicit_slug(db, Category, explicit_slug)
        else:
            category = await commit_with_slug_retry(
                db,
                Category,
                resolve=lambda: resolve_unique_slug_async(category_data.title, make_slug_exists(db, Category)),
                apply=apply,
            )

        logger.info(f"分类已创建: id={category.id}, slug={category.slug}")
        return await CategoryService.get_category_by_id(db, category.id, refresh=True)

    @staticmethod
    async def update_category(
        db: AsyncSession,
        category_id: int,
        category_data: CategoryUpdate,
    ) -> Optional[Category]:
        """
        更新分类（仅更新显式提供的字段）

        提供了新标题但未提供slug时重新生成slug；新标题对应的slug与当前slug相同时保持不变。
        """
        category = await CategoryService.get_category_by_id(db, category_id)
        if not category:
            return None
        current_slug = category.slug

        update_data: Dict[str, Any] = category_data.model_dump(exclude_unset=True)
        explicit_slug = update_data.pop("slug", None)
        title = update_data.get("title")
        if "title" in update_data and title is None:
            update_data.pop("title")

        if "parent_id" in update_data:
            update_data["parent_id"] = await CategoryService._check_parent(
                db, update_data["parent_id"], category_id
            )

        if explicit_slug and explicit_slug != current_slug:
            if await make_slug_exists(db, Category, exclude_id=category_id)(explicit_slug):
                raise ValueError(f"slug '{explicit_slug}' 已存在")

        async def apply(slug: Optional[str]) -> Category:
            target = await CategoryService.get_category_by_id(db, category_id, refresh=True)
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
                make_slug_exists(db, Category, exclude_id=category_id),
            )

        if explicit_slug:
            await apply(explicit_slug)
            await commit_explicit_slug(db, Category, explicit_slug)
        else:
            await commit_with_slug_retry(db, Category, resolve=resolve, apply=apply)

        return await CategoryService.get_category_by_id(db, category_id, refresh=True)

    @staticmethod
    async def delete_category(db: AsyncSession, category_id: int) -> bool:
        """
        软删除分类

        存在未删除的子分类时拒绝删除。
        """
        category = await CategoryService.get_category_by_id(db, category_id)
        if not category:
            return False

        child_check = await db.execute(
            select(Category.id).where(
                Category.parent_id == category_id,
                Category.deleted_at.is_(None),
            ).limit(1)
        )
        if child_check.scalar_one_or_none() is not None:
            raise ValueError("无法删除包含子分类的分类")

        category.soft_delete()
        await db.commit()
        logger.info(f"分类已删除: id={category_id}")
        return True

    @staticmethod
    async def restore_category(db: AsyncSession, category_id: int) -> Optional[Category]:
        """
        恢复已软删除的分类
        """
        category = await CategoryService.get_category_by_id(db, category_id, with_deleted=True)
        if not category:
            return None
        if not category.is_deleted:
            return category

        if await make_slug_exists(db, Category, exclude_id=category_id, include_soft_deleted=False)(category.slug):
            raise ValueError(f"slug '{category.slug}' 已被其他分类占用，无法恢复")

        category.restore()
        await db.commit()
        return await CategoryService.get_category_by_id(db, category_id, refresh=True)

    @staticmethod
    async def list_categories(
        db: AsyncSession,
        page: int = 1,
        size: int = 20,
    ) -> Dict[str, Any]:
        """
        获取分类列表（支持分页，按创建时间倒序）
        """
        query = select(Category).where(Category.deleted_at.is_(None))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await db.execute(count_query)
        total = total_result.scalar() or 0

        query = _with_parent(query).order_by(Category.created_at.desc(), Category.id.desc())
        query = query.offset((page - 1) * size).limit(size)

        result = await db.execute(query)
        categories = list(result.scalars().all())

        total_pages = (total + size - 1) // size if total > 0 else 1

        return {
            "total": total,
            "categories": categories,
            "page": page,
            "size": size,
            "total_pages": total_pages,
        }
