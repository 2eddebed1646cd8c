"""
核心系统模型模块
"""

from app.models.core.user import User

__all__ = ["User"]
