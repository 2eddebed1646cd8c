import pytest
from fastapi.testclient import TestClient

from main import app

API = "/api/v1"


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _create_category(client, **payload):
    resp = client.post(f"{API}/blog/categories", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _create_post(client, category_id, **payload):
    body = {"content_raw": "body", "content_html": "<p>body</p>", "category_id": category_id}
    body.update(payload)
    resp = client.post(f"{API}/blog/posts", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health_and_ping(client):
    assert client.get(f"{API}/ping").json() == {"message": "pong"}
    resp = client.get(f"{API}/health", headers={"x-request-id": "abc123"})
    assert resp.headers["X-Request-ID"] == "abc123"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    health = resp.json()
    assert health["checks"] == {"database": "healthy", "redis": "disabled"}


def test_category_crud(client):
    created = _create_category(client, title="Hello World")
    assert created["slug"] == "hello-world"

    dup = _create_category(client, title="Hello World")
    assert dup["slug"] == "hello-world-1"

    resp = client.put(f"{API}/blog/categories/{dup['id']}", json={"title": "Renamed"})
    assert resp.status_code == 200
    assert resp.json()["slug"] == "renamed"

    resp = client.get(f"{API}/blog/categories/slug/renamed")
    assert resp.status_code == 200
    assert resp.json()["id"] == dup["id"]

    listing = client.get(f"{API}/blog/categories").json()
    assert listing["total"] == 2

    assert client.delete(f"{API}/blog/categories/{dup['id']}").status_code == 204
    assert client.get(f"{API}/blog/categories/{dup['id']}").status_code == 404

    resp = client.post(f"{API}/blog/categories/{dup['id']}/restore")
    assert resp.status_code == 200
    assert resp.json()["deleted_at"] is None


def test_category_validation_errors(client):
    _create_category(client, title="News")
    resp = client.post(f"{API}/blog/categories", json={"title": "Other", "slug": "news"})
    assert resp.status_code == 400

    resp = client.post(f"{API}/blog/categories", json={"title": "???"})
    assert resp.status_code == 422

    resp = client.post(f"{API}/blog/categories", json={"title": "Bad", "slug": "has space"})
    assert resp.status_code == 422


def test_delete_category_with_children(client):
    parent = _create_category(client, title="Parent")
    _create_category(client, title="Child", parent_id=parent["id"])
    assert client.delete(f"{API}/blog/categories/{parent['id']}").status_code == 422


def test_post_flow(client):
    category = _create_category(client, title="General")
    post = _create_post(client, category["id"], title="Hello World", is_published=True)
    assert post["slug"] == "hello-world"
    assert post["published_at"] is not None
    assert post["category"]["slug"] == "general"

    draft = _create_post(client, category["id"], title="Hello World")
    assert draft["slug"] == "hello-world-1"

    # 草稿不通过公开slug接口暴露
    assert client.get(f"{API}/blog/posts/slug/hello-world-1").status_code == 404
    public = client.get(f"{API}/blog/posts/slug/hello-world")
    assert public.status_code == 200
    assert public.json()["id"] == post["id"]

    resp = client.put(f"{API}/blog/posts/{post['id']}", json={"title": "Hello, World!"})
    assert resp.json()["slug"] == "hello-world"

    listing = client.get(f"{API}/blog/posts", params={"published_only": True}).json()
    assert [p["id"] for p in listing["posts"]] == [post["id"]]

    assert client.delete(f"{API}/blog/posts/{post['id']}").status_code == 204
    assert client.get(f"{API}/blog/posts/slug/hello-world").status_code == 404
    assert client.delete(f"{API}/blog/posts/{post['id']}").status_code == 404

    again = _create_post(client, category["id"], title="Hello World")
    assert again["slug"] == "hello-world-2"


def test_post_missing(client):
    assert client.get(f"{API}/blog/posts/999").status_code == 404
    assert client.put(f"{API}/blog/posts/999", json={"title": "x"}).status_code == 404
    assert client.post(f"{API}/blog/posts/999/restore").status_code == 404


def test_catalog_job(client, tmp_path, monkeypatch):
    from app.core.config import settings

    monkeypatch.setattr(settings, "CATALOG_DIR", str(tmp_path))
    category = _create_category(client, title="General")
    _create_post(client, category["id"], title="Visible", is_published=True)

    resp = client.post(f"{API}/blog/catalog")
    assert resp.status_code == 202
    assert resp.json()["queued"] is False
    assert (tmp_path / "catalog_1.json").exists()


def test_child_category_create_and_move(client):
    root = _create_category(client, title="Root")
    child = _create_category(client, title="Child", parent_id=root["id"])
    assert child["parent_title"] == "Root"

    other = _create_category(client, title="Other")
    resp = client.put(f"{API}/blog/categories/{child['id']}", json={"parent_id": other["id"]})
    assert resp.status_code == 200, resp.text
    assert resp.json()["parent_title"] == "Other"

    resp = client.get(f"{API}/blog/categories/slug/child")
    assert resp.json()["parent_title"] == "Other"


def test_explicit_slug_keeps_case(client):
    created = _create_category(client, title="Anything", slug="My-Slug")
    assert created["slug"] == "My-Slug"
    assert client.get(f"{API}/blog/categories/slug/My-Slug").status_code == 200


def test_category_detail_cache_is_invalidated(client, monkeypatch):
    from app.utils.cache import cache

    store = {}

    async def fake_get(key):
        return store.get(key)

    async def fake_set(key, value, expire_seconds=None):
        store[key] = value
        return True

    async def fake_clear_pattern(pattern):
        prefix = pattern.rstrip("*")
        for key in [k for k in store if k.startswith(prefix)]:
            del store[key]
        return 0

    monkeypatch.setattr(cache, "get", fake_get)
    monkeypatch.setattr(cache, "set", fake_set)
    monkeypatch.setattr(cache, "clear_pattern", fake_clear_pattern)

    category = _create_category(client, title="Cached")
    assert client.get(f"{API}/blog/categories/slug/cached").status_code == 200
    assert "blog:categories:p:detail:cached" in store

    client.put(f"{API}/blog/categories/{category['id']}", json={"description": "changed"})
    assert store == {}
    resp = client.get(f"{API}/blog/categories/slug/cached")
    assert resp.json()["description"] == "changed"
