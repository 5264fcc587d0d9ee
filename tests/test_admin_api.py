# tests/test_admin_api.py
"""Tests for the HTTP Basic protected admin endpoints."""

import base64
from datetime import datetime, timedelta

from fastapi import status

from cow_blog.db.persistence import insert
from cow_blog.db.query import POST_TAGS, TAGS, Query, count, fetch_first
from cow_blog.db.schema import EntityType
from cow_blog.models import Comment
from cow_blog.services.tags import add_tags_to_post


def test_admin_requires_credentials(client, user) -> None:
    response = client.get("/api/v1/admin/posts")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_admin_rejects_wrong_password(client, user) -> None:
    token = base64.b64encode(b"admin:wrong").decode()
    response = client.get("/api/v1/admin/posts", headers={"Authorization": f"Basic {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.headers["www-authenticate"].startswith("Basic")


def test_admin_lists_every_post(client, admin_auth, post, draft_post) -> None:
    response = client.get("/api/v1/admin/posts", headers=admin_auth)
    assert response.status_code == status.HTTP_200_OK
    assert {item["id"] for item in response.json()["items"]} == {post.id, draft_post.id}


def test_admin_sees_draft_post_with_markdown(client, admin_auth, draft_post, db_session) -> None:
    insert(db_session, Comment(post_id=draft_post.id, markdown="held", status="draft"))

    response = client.get(f"/api/v1/admin/posts/{draft_post.id}", headers=admin_auth)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["markdown"] == "Body of *Secret Plans*"
    assert [c["status"] for c in data["comments"]] == ["draft"]


def test_create_post_with_tags(client, admin_auth, category, db_session) -> None:
    response = client.post(
        "/api/v1/admin/posts",
        json={
            "title": "Why Cows Moo",
            "markdown": "Because *cows*.",
            "status": "public",
            "category_id": category.id,
            "tags": "Cows, Sound, Cows",
        },
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["url"] == "why-cows-moo"
    assert data["html"] == "<p>Because <em>cows</em>.</p>"
    assert data["user"]["username"] == "admin"
    assert [t["url"] for t in data["tags"]] == ["cows", "sound"]
    assert count(db_session, POST_TAGS.filter(post_id=data["id"])) == 2


def test_create_post_derives_free_url(client, admin_auth, post) -> None:
    response = client.post(
        "/api/v1/admin/posts",
        json={"title": "Hello World", "markdown": "again"},
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["url"] == "hello-world-2"
    assert response.json()["status"] == "draft"


def test_create_post_with_taken_url_conflicts(client, admin_auth, post) -> None:
    response = client.post(
        "/api/v1/admin/posts",
        json={"title": "Copy", "markdown": "x", "url": "hello-world"},
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_edit_post_adds_and_removes_tags(client, admin_auth, post, db_session) -> None:
    (lisp,) = add_tags_to_post(db_session, post, ["Lisp"])

    response = client.put(
        f"/api/v1/admin/posts/{post.id}",
        json={"title": "Hello Cows", "tags": "Cows", "remove_tag_ids": [lisp.id]},
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["title"] == "Hello Cows"
    assert data["url"] == "hello-world"
    assert [t["title"] for t in data["tags"]] == ["Cows"]


def test_edit_post_rejects_null_status(client, admin_auth, post) -> None:
    response = client.put(
        f"/api/v1/admin/posts/{post.id}",
        json={"status": None},
        headers=admin_auth,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "status"
    assert client.get("/api/v1/posts/hello-world").status_code == status.HTTP_200_OK


def test_replace_post_tags(client, admin_auth, post, db_session) -> None:
    add_tags_to_post(db_session, post, ["Lisp", "Cows"])

    response = client.put(
        f"/api/v1/admin/posts/{post.id}/tags",
        json={"tags": "Cows, Milk"},
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_200_OK
    assert [t["title"] for t in response.json()["tags"]] == ["Cows", "Milk"]
    assert count(db_session, POST_TAGS) == 2
    assert count(db_session, TAGS) == 3


def test_replace_tags_of_missing_post_is_not_found(client, admin_auth) -> None:
    response = client.put("/api/v1/admin/posts/9999/tags", json={"tags": "x"}, headers=admin_auth)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_edit_missing_post_is_not_found(client, admin_auth) -> None:
    response = client.put("/api/v1/admin/posts/9999", json={"title": "x"}, headers=admin_auth)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_post(client, admin_auth, post, db_session) -> None:
    add_tags_to_post(db_session, post, ["Lisp"])

    response = client.delete(f"/api/v1/admin/posts/{post.id}", headers=admin_auth)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert fetch_first(db_session, Query(EntityType.POST).by_id(post.id)) is None
    assert count(db_session, POST_TAGS) == 0
    assert count(db_session, TAGS) == 1


def test_admin_lists_comments_with_total(client, admin_auth, post, db_session) -> None:
    shown = insert(db_session, Comment(post_id=post.id, markdown="first"))
    held = insert(db_session, Comment(post_id=post.id, markdown="held", status="draft"))

    response = client.get("/api/v1/admin/comments", headers=admin_auth)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["total"] == 2
    assert data["page"] == 1
    assert {item["id"] for item in data["items"]} == {shown.id, held.id}


def test_admin_gets_held_comment(client, admin_auth, post, db_session) -> None:
    comment = insert(db_session, Comment(post_id=post.id, markdown="*held*", status="draft"))

    response = client.get(f"/api/v1/admin/comments/{comment.id}", headers=admin_auth)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["markdown"] == "*held*"
    assert data["status"] == "draft"
    assert datetime.fromisoformat(data["date_created"]).utcoffset() == timedelta(0)

    missing = client.get("/api/v1/admin/comments/9999", headers=admin_auth)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_edit_comment_status(client, admin_auth, post, db_session) -> None:
    comment = insert(db_session, Comment(post_id=post.id, markdown="spam?"))

    response = client.put(
        f"/api/v1/admin/comments/{comment.id}",
        json={"status": "draft"},
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "draft"

    public = client.get("/api/v1/posts/hello-world").json()
    assert public["comments"] == []


def test_edit_comment_rejects_unknown_status(client, admin_auth, post, db_session) -> None:
    comment = insert(db_session, Comment(post_id=post.id, markdown="hm"))

    response = client.put(
        f"/api/v1/admin/comments/{comment.id}",
        json={"status": "hidden"},
        headers=admin_auth,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "status"


def test_edit_comment_rejects_null_author(client, admin_auth, post, db_session) -> None:
    comment = insert(db_session, Comment(post_id=post.id, markdown="hm"))

    response = client.put(
        f"/api/v1/admin/comments/{comment.id}",
        json={"author": None},
        headers=admin_auth,
    )
    assert response.status_code == 422
    assert response.json()["field"] == "author"


def test_term_crud_and_merge(client, admin_auth, post, db_session) -> None:
    (lisp,) = add_tags_to_post(db_session, post, ["Lisp"])

    created = client.post("/api/v1/admin/tags", json={"title": "Clojure"}, headers=admin_auth)
    assert created.status_code == status.HTTP_201_CREATED
    clj = created.json()
    assert clj["url"] == "clojure"

    merged = client.post(
        "/api/v1/admin/tags/merge",
        json={"from_id": lisp.id, "to_id": clj["id"]},
        headers=admin_auth,
    )
    assert merged.status_code == status.HTTP_200_OK
    assert fetch_first(db_session, POST_TAGS.filter(post_id=post.id, tag_id=clj["id"])) is not None

    renamed = client.put(
        f"/api/v1/admin/tags/{clj['id']}",
        json={"title": "Clojure Lisp"},
        headers=admin_auth,
    )
    assert renamed.json()["url"] == "clojure-lisp"

    deleted = client.delete(f"/api/v1/admin/tags/{clj['id']}", headers=admin_auth)
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert count(db_session, TAGS) == 0


def test_duplicate_category_url_conflicts(client, admin_auth, category) -> None:
    response = client.post(
        "/api/v1/admin/categories",
        json={"title": "Code", "url": "programming"},
        headers=admin_auth,
    )
    assert response.status_code == status.HTTP_409_CONFLICT


def test_unknown_term_kind_is_not_found(client, admin_auth) -> None:
    response = client.post("/api/v1/admin/widgets", json={"title": "x"}, headers=admin_auth)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_update_counts_endpoint(client, admin_auth, post, db_session) -> None:
    insert(db_session, Comment(post_id=post.id, markdown="one"))

    response = client.post("/api/v1/admin/maintenance/update-counts", headers=admin_auth)
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"posts": 1, "categories": 1, "tags": 0, "total": 2}
