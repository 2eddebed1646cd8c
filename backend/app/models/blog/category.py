"""
博客分类模型定义 - 使用 blog_ 前缀
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from app.db.database import Base
from app.models.base import TimestampMixin, SoftDeleteMixin


class Category(TimestampMixin, SoftDeleteMixin, Base):
    """分类表模型 - blog_categories"""
    __tablename__ = "blog_categories"

    # 根分类ID
    ROOT_ID = 1

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    parent_id = Column(Integer, ForeignKey("blog_categories.id"), nullable=True, comment="父分类ID (可选)")

    title = Column(String(255), nullable=False, comment="分类标题")
    slug = Column(String(255), nullable=False, index=True, comment="URL友好的别名")
    description = Column(String(500), nullable=True, comment="分类描述 (可选)")

    # 自引用关系不会级联预加载，查询时需显式 selectinload(Category.parent)
    parent = relationship("Category", remote_side=[id], lazy="raise_on_sql")
    posts = relationship("Post", back_populates="category", lazy="select")

    __table_args__ = (
        # 仅对未删除的记录强制slug唯一
        Index(
            "uq_blog_categories_slug_active",
            "slug",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    def is_root(self) -> bool:
        return self.id == self.ROOT_ID

    @property
    def parent_title(self) -> str:
        """父分类标题"""
        if self.parent is not None:
            return self.parent.title
        return "根分类" if self.is_root() else "???"

    def __repr__(self):
        return f"<Category(id={self.id}, title='{self.title}', slug='{self.slug}')>"
