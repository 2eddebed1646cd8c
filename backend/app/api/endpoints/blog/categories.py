"""
分类管理 API 端点
提供分类的完整CRUD操作（软删除）
"""

from typing import Any
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.blog import CategoryCreate, CategoryUpdate, CategoryResponse, CategoryList
from app.services.blog.category import CategoryService
from app.core.config import settings
from app.utils.cache import cache, BlogCacheKeys, clear_category_cache
from app.utils.slug import SlugConflictError

router = APIRouter()


def _not_found(category_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"分类ID {category_id} 不存在"
    )


@router.get("", response_model=CategoryList)
async def list_categories(
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(settings.CATEGORY_PAGE_SIZE_DEFAULT, ge=1, le=settings.CATEGORY_PAGE_SIZE_MAX, description="每页数量"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    获取分类列表（支持分页）
    """
    return await CategoryService.list_categories(db=db, page=page, size=size)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    创建新分类

    未提供slug时根据标题自动生成唯一slug
    """
    try:
        return await CategoryService.create_category(db=db, category_data=category_data)
    except SlugConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"创建分类失败: {str(e)}"
        )


@router.get("/slug/{slug}", response_model=CategoryResponse)
async def get_category_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    根据slug获取分类详情（公开接口，带缓存）
    """
    cache_key = BlogCacheKeys.category_public_detail(slug)
    cached_result = await cache.get(cache_key)
    if cached_result is not None:
        return cached_result

    category = await CategoryService.get_category_by_slug(db=db, slug=slug)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"分类slug '{slug}' 不存在"
        )

    category_dict = CategoryResponse.model_validate(category).model_dump(mode="json")
    await cache.set(cache_key, category_dict, expire_seconds=settings.BLOG_CACHE_PUBLIC_DETAIL_TTL)
    return category_dict


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    根据ID获取分类详情
    """
    category = await CategoryService.get_category_by_id(db=db, category_id=category_id)
    if not category:
        raise _not_found(category_id)
    return category


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    更新分类

    提供新标题且未提供slug时重新生成slug
    """
    try:
        category = await CategoryService.update_category(
            db=db,
            category_id=category_id,
            category_data=category_data
        )
    except SlugConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"更新分类失败: {str(e)}"
        )

    if not category:
        raise _not_found(category_id)

    await clear_category_cache()
    return category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    删除分类（软删除，存在子分类时拒绝）
    """
    category = await CategoryService.get_category_by_id(db=db, category_id=category_id)
    if not category:
        raise _not_found(category_id)

    try:
        await CategoryService.delete_category(db=db, category_id=category_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    await clear_category_cache()


@router.post("/{category_id}/restore", response_model=CategoryResponse)
async def restore_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    恢复已删除的分类
    """
    try:
        category = await CategoryService.restore_category(db=db, category_id=category_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not category:
        raise _not_found(category_id)
    await clear_category_cache()
    return category
