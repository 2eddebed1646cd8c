"""
博客缓存
公开详情接口的 Redis 读缓存，写操作后按 slug 失效

Redis 不可用时只记录日志，读按未命中处理、写直接跳过，不影响请求本身。
"""

import asyncio
import json
import logging
from typing import Any, Optional

import redis.asyncio as redis

from app.core.config import settings

logger = logging.getLogger(__name__)


class RedisCache:
    """按事件循环绑定的 Redis 客户端；循环切换（测试、任务进程）时重建连接"""

    def __init__(self) -> None:
        self._client: Optional[redis.Redis] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def enabled(self) -> bool:
        return settings.CACHE_ENABLED

    async def _connect(self) -> redis.Redis:
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB_CACHE,
            decode_responses=True,
            socket_connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
            socket_keepalive=True,
            retry_on_timeout=True,
        )
        await client.ping()
        logger.info(f"Redis缓存已连接: {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB_CACHE}")
        return client

    async def get_client(self) -> redis.Redis:
        loop = asyncio.get_running_loop()
        if self._client is not None and self._loop is loop:
            return self._client
        if self._client is not None and self._loop is not None and not self._loop.is_closed():
            # 旧循环仍存活时才能正常关闭连接
            await self.close()
        self._client = await self._connect()
        self._loop = loop
        return self._client

    async def close(self) -> None:
        client, self._client, self._loop = self._client, None, None
        if client is None:
            return
        try:
            await client.aclose()
        except Exception as e:
            logger.warning(f"Redis关闭连接时出错: {e}")

    async def get(self, key: str) -> Optional[Any]:
        if not self.enabled:
            return None
        try:
            raw = await (await self.get_client()).get(key)
            return None if raw is None else json.loads(raw)
        except Exception as e:
            logger.warning(f"读取缓存 {key} 失败: {e}")
            return None

    async def set(self, key: str, value: Any, expire_seconds: Optional[int] = None) -> bool:
        """写入 JSON 值；expire_seconds 为空时不过期"""
        if not self.enabled:
            return False
        try:
            client = await self.get_client()
            payload = json.dumps(value, ensure_ascii=False, default=str)
            return bool(await client.set(key, payload, ex=expire_seconds))
        except Exception as e:
            logger.warning(f"写入缓存 {key} 失败: {e}")
            return False

    async def delete(self, *keys: str) -> int:
        if not self.enabled or not keys:
            return 0
        try:
            return int(await (await self.get_client()).delete(*keys) or 0)
        except Exception as e:
            logger.warning(f"删除缓存失败: {e}")
            return 0

    async def clear_pattern(self, pattern: str) -> int:
        """SCAN 匹配的键并分批删除"""
        if not self.enabled:
            return 0
        deleted = 0
        try:
            client = await self.get_client()
            batch = []
            async for key in client.scan_iter(match=pattern, count=1000):
                batch.append(key)
                if len(batch) >= 500:
                    deleted += int(await client.delete(*batch) or 0)
                    batch = []
            if batch:
                deleted += int(await client.delete(*batch) or 0)
        except Exception as e:
            logger.warning(f"按模式 '{pattern}' 清除缓存失败: {e}")
        return deleted

    async def ping(self) -> bool:
        try:
            return bool(await (await self.get_client()).ping())
        except Exception:
            return False


cache = RedisCache()


class BlogCacheKeys:
    """博客缓存键"""

    @staticmethod
    def post_public_detail(slug: str) -> str:
        return f"blog:posts:p:detail:{slug}"

    @staticmethod
    def category_public_detail(slug: str) -> str:
        return f"blog:categories:p:detail:{slug}"


async def clear_post_cache(*slugs: Optional[str]) -> None:
    """slug 变更时新旧 slug 都要失效"""
    keys = [BlogCacheKeys.post_public_detail(s) for s in set(slugs) if s]
    await cache.delete(*keys)


async def clear_category_cache() -> None:
    """分类变更后清空所有分类和文章详情缓存：子分类响应含父分类标题，文章详情嵌套分类信息"""
    await cache.clear_pattern(BlogCacheKeys.category_public_detail("*"))
    await cache.clear_pattern(BlogCacheKeys.post_public_detail("*"))


async def shutdown_cache() -> None:
    await cache.close()
