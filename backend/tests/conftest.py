import asyncio
import os
import tempfile

# 在导入 app 之前配置测试环境：SQLite 临时库、关闭缓存、任务进程内执行
_TMP_DIR = tempfile.mkdtemp(prefix="blog-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["DEBUG"] = "true"
os.environ["CACHE_ENABLED"] = "false"
os.environ["BLOG_JOBS_USE_CELERY"] = "false"
os.environ["CATALOG_DIR"] = os.path.join(_TMP_DIR, "catalog")

import pytest

from app.core.config import settings
from app.db.database import AsyncSessionLocal, engine
from app.models import Base, User


async def _reset_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        session.add(User(id=settings.DEFAULT_AUTHOR_ID, name="Test Author", email="author@test.local"))
        await session.commit()


@pytest.fixture(autouse=True)
def reset_db():
    asyncio.run(_reset_tables())
    yield


@pytest.fixture
def run_db():
    """在独立会话中执行 fn(db) 并返回结果"""

    def _run(fn):
        async def _inner():
            async with AsyncSessionLocal() as db:
                return await fn(db)

        return asyncio.run(_inner())

    return _run
