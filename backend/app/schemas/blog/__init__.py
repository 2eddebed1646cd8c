"""
博客Schema模块
包含分类、文章相关的Pydantic模型
"""

from .category import (
    CategoryCreate,
    CategoryUpdate,
    CategoryResponse,
    CategoryInfo,
    CategoryList,
)

from .post import (
    PostCreate,
    PostUpdate,
    PostResponse,
    AuthorInfo,
    PostList,
)

__all__ = [
    # 分类Schema
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryInfo",
    "CategoryList",

    # 文章Schema
    "PostCreate",
    "PostUpdate",
    "PostResponse",
    "AuthorInfo",
    "PostList",
]
