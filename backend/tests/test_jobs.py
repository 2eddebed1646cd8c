import json

from app.core.config import settings
from app.schemas.blog import CategoryCreate, PostCreate
from app.services.blog.category import CategoryService
from app.services.blog.post import PostService
from app.tasks.blog import generate_catalog, generate_catalog_chunk, post_after_delete


def _seed_posts(run_db, published, drafts=0):
    async def _seed(db):
        category = await CategoryService.create_category(db, CategoryCreate(title="Catalog"))
        for i in range(published + drafts):
            await PostService.create_post(
                db,
                PostCreate(
                    title=f"Post {i}",
                    content_raw="body",
                    content_html="<p>body</p>",
                    category_id=category.id,
                    is_published=i < published,
                ),
                author_id=settings.DEFAULT_AUTHOR_ID,
            )

    run_db(_seed)


def test_post_after_delete_runs_in_process():
    result = post_after_delete.apply(args=(42,))
    assert result.get() == {"post_id": 42}


def test_generate_catalog_splits_into_chunks(run_db, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "CATALOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "CATALOG_CHUNK_SIZE", 2)
    _seed_posts(run_db, published=5, drafts=2)

    summary = generate_catalog.apply().get()
    assert summary == {"posts": 5, "chunks": 3}

    files = sorted(p.name for p in tmp_path.iterdir())
    assert files == ["catalog_1.json", "catalog_2.json", "catalog_3.json"]

    first = json.loads((tmp_path / "catalog_1.json").read_text(encoding="utf-8"))
    assert [entry["slug"] for entry in first] == ["post-0", "post-1"]
    last = json.loads((tmp_path / "catalog_3.json").read_text(encoding="utf-8"))
    assert len(last) == 1


def test_generate_catalog_without_posts(run_db, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "CATALOG_DIR", str(tmp_path))
    assert generate_catalog.apply().get() == {"posts": 0, "chunks": 0}
    assert list(tmp_path.iterdir()) == []


def test_catalog_chunk_is_rewritten(run_db, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "CATALOG_DIR", str(tmp_path))
    _seed_posts(run_db, published=1)

    for _ in range(2):
        result = generate_catalog_chunk.apply(args=([1], 7)).get()
    assert result["count"] == 1
    assert [p.name for p in tmp_path.iterdir()] == ["catalog_7.json"]
