"""
博客文章模型定义 - 使用 blog_ 前缀
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression
from app.db.database import Base
from app.models.base import TimestampMixin, SoftDeleteMixin


class Post(TimestampMixin, SoftDeleteMixin, Base):
    """文章表模型 - blog_posts"""
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # 外键关联
    category_id = Column(Integer, ForeignKey("blog_categories.id"), nullable=False, comment="分类ID")
    author_id = Column(Integer, ForeignKey("blog_users.id"), nullable=False, comment="作者ID")

    # 文章基本信息
    title = Column(String(255), nullable=False, comment="文章标题")
    slug = Column(String(255), nullable=False, index=True, comment="URL友好的别名")
    excerpt = Column(String(500), nullable=True, comment="文章摘要 (可选)")
    content_raw = Column(Text, nullable=False, comment="原始正文 (Markdown)")
    content_html = Column(Text, nullable=False, comment="渲染后的HTML正文")

    # 发布状态
    is_published = Column(Boolean, default=False, server_default=expression.false(), nullable=False, comment="是否发布")
    published_at = Column(DateTime(timezone=True), nullable=True, comment="发布时间")

    author = relationship("User", back_populates="posts", lazy="selectin")
    category = relationship("Category", back_populates="posts", lazy="selectin")

    __table_args__ = (
        Index(
            "uq_blog_posts_slug_active",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def __repr__(self):
        return f"<Post(id={self.id}, title='{self.title}', slug='{self.slug}')>"
