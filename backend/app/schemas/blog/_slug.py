"""
slug 字段的公共校验
"""

from typing import Optional

from app.utils.slug import make_slug


def normalize_slug(v: Optional[str]) -> Optional[str]:
    """
    空白视为未提供（返回 None，交给自动生成）

    显式提供的slug原样保存，只校验字符：ASCII字母、数字、破折号和下划线。
    """
    if v is None or not v.strip():
        return None
    if not v.isascii() or not v.replace("-", "").replace("_", "").isalnum():
        raise ValueError("slug只能包含字母、数字、破折号和下划线")
    return v


def ensure_sluggable(title: Optional[str], slug: Optional[str]) -> None:
    """需要自动生成slug时，标题必须能转换出非空slug"""
    if title is not None and not slug and not make_slug(title):
        raise ValueError("无法根据标题生成slug，请手动填写slug")
