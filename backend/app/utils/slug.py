"""
slug 生成工具
将标题转换为URL友好的别名，并在冲突时追加递增数字后缀
"""

import re
from itertools import count
from typing import Awaitable, Callable, Iterator, Optional

from slugify import slugify

SlugExists = Callable[[str], bool]
AsyncSlugExists = Callable[[str], Awaitable[bool]]

# 字母、数字、空白和连字符之外的字符直接删除，不当作分隔符
_PUNCTUATION = re.compile(r"[^\w\s-]")


class SlugConflictError(ValueError):
    """多次重试后仍无法写入唯一slug"""


def make_slug(title: str) -> str:
    """
    标题 -> slug：小写ASCII、连字符分隔

    标点被删除（"Don't Panic" -> dont-panic），下划线视为分隔符，
    非拉丁文字会被音译。
    """
    text = _PUNCTUATION.sub("", (title or "").replace("_", " "))
    return slugify(text)


def candidate_slugs(base: str) -> Iterator[str]:
    """按顺序产生候选slug：base, base-1, base-2, ..."""
    yield base
    for counter in count(1):
        yield f"{base}-{counter}"


def resolve_unique_slug(title: str, exists: SlugExists) -> str:
    """
    生成唯一slug

    exists 是对目标记录集合的只读探测（已包含排除规则），
    返回第一个 exists(candidate) 为 False 的候选值。
    exists 抛出的异常原样向上传播。
    """
    return next(c for c in candidate_slugs(make_slug(title)) if not exists(c))


async def resolve_unique_slug_async(title: str, exists: AsyncSlugExists) -> str:
    """resolve_unique_slug 的异步版本，exists 为协程函数"""
    for candidate in candidate_slugs(make_slug(title)):
        if not await exists(candidate):
            return candidate


def resolve_update_slug(title: str, current_slug: Optional[str], exists: SlugExists) -> Optional[str]:
    """
    更新记录标题时重新生成slug

    新标题得到的基础slug与当前slug相同时返回 None（无需更新）。
    """
    if make_slug(title) == current_slug:
        return None
    return resolve_unique_slug(title, exists)


async def resolve_update_slug_async(
    title: str,
    current_slug: Optional[str],
    exists: AsyncSlugExists,
) -> Optional[str]:
    if make_slug(title) == current_slug:
        return None
    return await resolve_unique_slug_async(title, exists)
