"""
用户模型定义 - 文章作者
"""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from app.db.database import Base
from app.models.base import TimestampMixin


class User(TimestampMixin, Base):
    """用户表模型 - blog_users"""
    __tablename__ = "blog_users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, comment="显示名称")
    email = Column(String(255), unique=True, index=True, nullable=False, comment="邮箱")

    posts = relationship("Post", back_populates="author", lazy="select")

    def __repr__(self):
        return f"<User(id={self.id}, name='{self.name}')>"
