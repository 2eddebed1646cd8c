"""
博客 API 路由
"""

from fastapi import APIRouter

from .categories import router as categories_router
from .posts import router as posts_router
from .catalog import router as catalog_router

router = APIRouter()
router.include_router(categories_router, prefix="/categories", tags=["blog-categories"])
router.include_router(posts_router, prefix="/posts", tags=["blog-posts"])
router.include_router(catalog_router, prefix="/catalog", tags=["blog-catalog"])

__all__ = ["router"]
