"""
项目所有Pydantic Schema定义
按功能模块组织在子目录中

导入结构示例：
    from app.schemas.blog import PostCreate, PostResponse
"""

from .blog import *

__all__ = [
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryInfo",
    "CategoryList",
    "PostCreate",
    "PostUpdate",
    "PostResponse",
    "AuthorInfo",
    "PostList",
]
