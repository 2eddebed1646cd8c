"""
模型公共混入类
定义时间戳和软删除等公共字段与方法
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, event
from sqlalchemy.sql import func


class TimestampMixin:
    """创建/更新时间戳"""

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")


class SoftDeleteMixin:
    """软删除：通过 deleted_at 时间戳标记删除，而不是物理删除记录"""

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True, comment="删除时间（软删除）")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self) -> None:
        """标记为已删除"""
        self.deleted_at = datetime.now(timezone.utc)

    def restore(self) -> None:
        """撤销软删除"""
        self.deleted_at = None


# 通用事件监听器 - 在ORM更新时自动刷新updated_at字段
@event.listens_for(TimestampMixin, "before_update", propagate=True)
def receive_before_update(mapper, connection, target):
    """在更新前自动设置updated_at为当前时间"""
    target.updated_at = datetime.now(timezone.utc)
