"""
博客模型模块
包含分类和文章模型
"""

from app.models.blog.category import Category
from app.models.blog.post import Post

__all__ = ["Category", "Post"]
