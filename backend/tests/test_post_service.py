import pytest

from app.core.config import settings
from app.schemas.blog import CategoryCreate, PostCreate, PostUpdate
from app.services.blog.category import CategoryService
from app.services.blog.post import PostService


@pytest.fixture
def category(run_db):
    return run_db(lambda db: CategoryService.create_category(db, CategoryCreate(title="General")))


def _create(run_db, category, **kwargs):
    data = {"content_raw": "body", "content_html": "<p>body</p>", "category_id": category.id}
    data.update(kwargs)
    return run_db(
        lambda db: PostService.create_post(db, PostCreate(**data), author_id=settings.DEFAULT_AUTHOR_ID)
    )


def test_create_generates_unique_slugs(run_db, category):
    first = _create(run_db, category, title="Hello World")
    second = _create(run_db, category, title="Hello World")
    assert first.slug == "hello-world"
    assert second.slug == "hello-world-1"
    assert first.author.id == settings.DEFAULT_AUTHOR_ID
    assert first.category.slug == "general"


def test_post_and_category_slugs_are_separate(run_db, category):
    post = _create(run_db, category, title="General")
    assert post.slug == "general"


def test_published_at_set_on_publish(run_db, category):
    draft = _create(run_db, category, title="Draft")
    assert draft.published_at is None

    published = _create(run_db, category, title="Live", is_published=True)
    assert published.published_at is not None

    updated = run_db(lambda db: PostService.update_post(db, draft.id, PostUpdate(is_published=True)))
    assert updated.is_published is True
    assert updated.published_at is not None


def test_create_in_missing_category_fails(run_db, category):
    with pytest.raises(ValueError):
        _create(run_db, category, title="Lost", category_id=999)


def test_explicit_slug_conflict_rejected(run_db, category):
    _create(run_db, category, title="Taken")
    with pytest.raises(ValueError):
        _create(run_db, category, title="Other", slug="taken")


def test_update_title_regenerates_slug(run_db, category):
    _create(run_db, category, title="Hello World")
    post = _create(run_db, category, title="Old Title")
    assert post.slug == "old-title"

    updated = run_db(lambda db: PostService.update_post(db, post.id, PostUpdate(title="Hello World")))
    assert updated.slug == "hello-world-1"

    same = run_db(lambda db: PostService.update_post(db, post.id, PostUpdate(title="HELLO WORLD")))
    assert same.slug == "hello-world-1"


def test_update_own_base_slug_is_noop(run_db, category):
    post = _create(run_db, category, title="Hello World")
    updated = run_db(lambda db: PostService.update_post(db, post.id, PostUpdate(title="Hello, World")))
    assert updated.slug == "hello-world"


def test_update_ignores_null_for_required_fields(run_db, category):
    post = _create(run_db, category, title="Keep")
    updated = run_db(lambda db: PostService.update_post(db, post.id, PostUpdate(content_raw=None, excerpt="short")))
    assert updated.content_raw == "body"
    assert updated.excerpt == "short"


def test_delete_and_restore(run_db, category):
    post = _create(run_db, category, title="Gone")
    assert run_db(lambda db: PostService.delete_post(db, post.id)) is True
    assert run_db(lambda db: PostService.get_post_by_slug(db, "gone")) is None
    assert run_db(lambda db: PostService.delete_post(db, post.id)) is False

    # 默认策略下软删除的slug仍被占用
    assert _create(run_db, category, title="Gone").slug == "gone-1"

    restored = run_db(lambda db: PostService.restore_post(db, post.id))
    assert restored.deleted_at is None
    assert restored.slug == "gone"


def test_list_posts_filters(run_db, category):
    _create(run_db, category, title="Draft")
    _create(run_db, category, title="Live", is_published=True)
    deleted = _create(run_db, category, title="Deleted", is_published=True)
    run_db(lambda db: PostService.delete_post(db, deleted.id))

    everything = run_db(lambda db: PostService.list_posts(db))
    assert everything["total"] == 2

    published = run_db(lambda db: PostService.list_posts(db, published_only=True))
    assert [p.slug for p in published["posts"]] == ["live"]

    other = run_db(lambda db: PostService.list_posts(db, category_id=category.id + 100))
    assert other["total"] == 0
