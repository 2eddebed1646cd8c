"""
文章管理 API 端点
提供文章的完整CRUD操作（软删除）
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.blog import PostCreate, PostUpdate, PostResponse, PostList
from app.services.blog.post import PostService
from app.core.config import settings
from app.utils.cache import cache, BlogCacheKeys, clear_post_cache
from app.utils.slug import SlugConflictError

router = APIRouter()


def _not_found(post_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"文章ID {post_id} 不存在"
    )


@router.get("", response_model=PostList)
async def list_posts(
    page: int = Query(1, ge=1, description="页码"),
    size: int = Query(settings.POST_PAGE_SIZE_DEFAULT, ge=1, le=settings.POST_PAGE_SIZE_MAX, description="每页数量"),
    published_only: bool = Query(False, description="是否只显示已发布的文章"),
    category_id: Optional[int] = Query(None, description="按分类ID筛选"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    获取文章列表（支持分页和筛选）
    """
    return await PostService.list_posts(
        db=db,
        page=page,
        size=size,
        published_only=published_only,
        category_id=category_id,
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    创建新文章

    作者固定为 DEFAULT_AUTHOR_ID；未提供slug时根据标题自动生成唯一slug
    """
    try:
        return await PostService.create_post(
            db=db,
            post_data=post_data,
            author_id=settings.DEFAULT_AUTHOR_ID,
        )
    except SlugConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"创建文章失败: {str(e)}"
        )


@router.get("/slug/{slug}", response_model=PostResponse)
async def get_post_by_slug(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    根据slug获取已发布的文章（公开接口，带缓存）
    """
    cache_key = BlogCacheKeys.post_public_detail(slug)
    cached_result = await cache.get(cache_key)
    if cached_result is not None:
        return cached_result

    post = await PostService.get_post_by_slug(db=db, slug=slug, published_only=True)
    if not post:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"文章slug '{slug}' 不存在"
        )

    post_dict = PostResponse.model_validate(post).model_dump(mode="json")
    await cache.set(cache_key, post_dict, expire_seconds=settings.BLOG_CACHE_PUBLIC_DETAIL_TTL)
    return post_dict


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    根据ID获取文章详情
    """
    post = await PostService.get_post_by_id(db=db, post_id=post_id)
    if not post:
        raise _not_found(post_id)
    return post


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    更新文章

    提供新标题且未提供slug时重新生成slug
    """
    try:
        existing = await PostService.get_post_by_id(db=db, post_id=post_id)
        old_slug = existing.slug if existing else None
        post = await PostService.update_post(db=db, post_id=post_id, post_data=post_data)
    except SlugConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"更新文章失败: {str(e)}"
        )

    if not post:
        raise _not_found(post_id)

    await clear_post_cache(old_slug, post.slug)
    return post


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    删除文章（软删除），并派发删除后的后台任务
    """
    post = await PostService.get_post_by_id(db=db, post_id=post_id)
    if not post:
        raise _not_found(post_id)
    slug = post.slug

    await PostService.delete_post(db=db, post_id=post_id)
    await clear_post_cache(slug)


@router.post("/{post_id}/restore", response_model=PostResponse)
async def restore_post(
    post_id: int,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    恢复已删除的文章
    """
    try:
        post = await PostService.restore_post(db=db, post_id=post_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not post:
        raise _not_found(post_id)
    await clear_post_cache(post.slug)
    return post
