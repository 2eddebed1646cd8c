import asyncio

import pytest

from app.schemas.blog import CategoryCreate, PostUpdate
from app.schemas.blog._slug import normalize_slug
from app.utils.slug import (
    candidate_slugs,
    make_slug,
    resolve_unique_slug,
    resolve_unique_slug_async,
    resolve_update_slug,
)


def _exists_in(slugs):
    return lambda candidate: candidate in slugs


def test_make_slug_basic():
    assert make_slug("Hello World") == "hello-world"
    assert make_slug("  Hello,   World!  ") == "hello-world"
    assert make_slug("") == ""


def test_make_slug_strips_punctuation():
    assert make_slug("Don't Panic") == "dont-panic"
    assert make_slug("Hello.World") == "helloworld"
    assert make_slug("snake_case title") == "snake-case-title"
    assert make_slug("C++ & Rust: 2024") == "c-rust-2024"


def test_make_slug_transliterates_cyrillic():
    assert make_slug("Привет мир") == "privet-mir"


def test_no_existing_slugs():
    assert resolve_unique_slug("Hello World", _exists_in(set())) == "hello-world"


def test_base_taken_gets_first_suffix():
    assert resolve_unique_slug("Hello World", _exists_in({"hello-world"})) == "hello-world-1"


def test_suffixes_tried_in_order():
    existing = {"hello-world", "hello-world-1"}
    assert resolve_unique_slug("Hello World", _exists_in(existing)) == "hello-world-2"


def test_gap_in_suffixes_is_filled():
    existing = {"hello-world", "hello-world-2"}
    assert resolve_unique_slug("Hello World", _exists_in(existing)) == "hello-world-1"


def test_update_same_base_is_noop():
    # 记录 #5 当前 slug 为 hello-world，标题不变
    calls = []

    def exists(candidate):
        calls.append(candidate)
        return True

    assert resolve_update_slug("Hello World", "hello-world", exists) is None
    assert calls == []


def test_update_collides_with_other_record():
    # 记录 #5 从 old-title 改名，hello-world 属于记录 #7
    owners = {"old-title": 5, "hello-world": 7}

    def exists(candidate):
        return owners.get(candidate, 5) != 5

    assert resolve_update_slug("Hello World", "old-title", exists) == "hello-world-1"


def test_exclusion_lets_record_keep_its_own_slug():
    owners = {"hello-world": 5}

    def exists_excluding_5(candidate):
        return owners.get(candidate) not in (None, 5)

    assert resolve_unique_slug("Hello World", exists_excluding_5) == "hello-world"


def test_result_never_exists():
    existing = {"post"} | {f"post-{i}" for i in range(1, 20)}
    exists = _exists_in(existing)
    slug = resolve_unique_slug("Post", exists)
    assert not exists(slug)
    assert slug == "post-20"


def test_deterministic():
    existing = {"a-b", "a-b-1"}
    results = {resolve_unique_slug("A b", _exists_in(existing)) for _ in range(5)}
    assert results == {"a-b-2"}


def test_candidates_checked_in_order():
    checked = []

    def exists(candidate):
        checked.append(candidate)
        return len(checked) < 4

    assert resolve_unique_slug("x", exists) == "x-3"
    assert checked == ["x", "x-1", "x-2", "x-3"]


def test_candidate_slugs_sequence():
    gen = candidate_slugs("news")
    assert [next(gen) for _ in range(4)] == ["news", "news-1", "news-2", "news-3"]


def test_lookup_errors_propagate():
    def exists(candidate):
        raise ConnectionError("storage down")

    with pytest.raises(ConnectionError):
        resolve_unique_slug("Hello", exists)


def test_async_resolver():
    existing = {"hello-world"}

    async def exists(candidate):
        return candidate in existing

    assert asyncio.run(resolve_unique_slug_async("Hello World", exists)) == "hello-world-1"


def test_normalize_slug():
    # 显式slug原样保存，大小写不变
    assert normalize_slug("My-Slug_1") == "My-Slug_1"
    assert normalize_slug("   ") is None
    assert normalize_slug(None) is None
    with pytest.raises(ValueError):
        normalize_slug("bad slug!")
    with pytest.raises(ValueError):
        normalize_slug(" padded ")
    with pytest.raises(ValueError):
        normalize_slug("слаг")


def test_unsluggable_title_requires_explicit_slug():
    with pytest.raises(ValueError):
        CategoryCreate(title="!!!")
    assert CategoryCreate(title="!!!", slug="bang").slug == "bang"
    # 只改其他字段时不校验标题
    assert PostUpdate(excerpt="x").title is None


def test_explicit_slug_stored_as_given():
    assert CategoryCreate(title="x", slug="My-Slug").slug == "My-Slug"
    assert PostUpdate(slug="").slug is None
