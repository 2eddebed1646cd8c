"""
数据库模型定义
表名前缀：blog_
"""

from app.db.database import Base

from .core import User
from .blog import Category, Post

__all__ = [
    "Base",
    "User",
    "Category",
    "Post",
]
