"""Service-level helpers for reading and writing posts."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.orm import Session

from cow_blog.core.errors import ValidationFailure
from cow_blog.core.settings import settings
from cow_blog.db.persistence import delete, insert, update
from cow_blog.db.query import (
    CATEGORIES,
    COMMENTS,
    POSTS,
    TAGS,
    Query,
    count,
    fetch_all,
    fetch_one,
    safe_int,
)
from cow_blog.db.schema import EntityType
from cow_blog.models import Category, Post, Tag, User
from cow_blog.models.post import POST_TYPE_BLOG, STATUS_DRAFT, STATUS_PUBLIC
from cow_blog.services.slug import slug_from_title, unique_url
from cow_blog.services.tags import (
    add_tags_to_post,
    remove_tags_from_post,
    set_post_tags,
    split_tag_titles,
)

__all__ = [
    "POST_STATUSES",
    "by_id_or_url",
    "list_posts",
    "count_posts",
    "get_post",
    "category_page",
    "tag_page",
    "create_post",
    "edit_post",
    "replace_post_tags",
    "delete_post",
]

logger = logging.getLogger(__name__)

POST_STATUSES = (STATUS_PUBLIC, STATUS_DRAFT)


def by_id_or_url(q: Query, key: int | str) -> Query:
    """Filter on the id when ``key`` looks numeric, otherwise on the url."""
    if isinstance(key, int) or str(key).strip().isdigit():
        return q.by_id(key)
    return q.by_url(str(key))


def _posts_query(admin: bool, post_type: str | None) -> Query:
    q = POSTS.admin(admin)
    if post_type is not None:
        q = q.by_type(post_type)
    return q


def list_posts(
    db: Session,
    *,
    admin: bool = False,
    page: int = 1,
    per_page: int | None = None,
    post_type: str | None = POST_TYPE_BLOG,
    category_id: int | None = None,
) -> list[Post]:
    """Return one page of posts, newest first."""
    q = _posts_query(admin, post_type)
    if category_id is not None:
        q = q.filter(category_id=category_id)
    return fetch_all(db, q.paginate(page, per_page or settings.posts_per_page))


def count_posts(
    db: Session,
    *,
    admin: bool = False,
    post_type: str | None = POST_TYPE_BLOG,
    category_id: int | None = None,
) -> int:
    """Return how many posts ``list_posts`` pages over."""
    q = _posts_query(admin, post_type)
    if category_id is not None:
        q = q.filter(category_id=category_id)
    return count(db, q)


def get_post(db: Session, key: int | str, *, admin: bool = False) -> Post:
    """Return a single post, by id or url, with its visible comments loaded.

    Raises:
        NotFound: If no visible post matches.
    """
    q = by_id_or_url(POSTS.admin(admin), key).include("comments", COMMENTS.admin(admin))
    return fetch_one(db, q)


def category_page(
    db: Session,
    key: int | str,
    *,
    admin: bool = False,
    page: int = 1,
    per_page: int | None = None,
) -> tuple[Category, list[Post], int]:
    """Return a category, one page of its blog posts and their total count."""
    category = fetch_one(db, by_id_or_url(CATEGORIES, key))
    posts = list_posts(db, admin=admin, page=page, per_page=per_page, category_id=category.id)
    total = count_posts(db, admin=admin, category_id=category.id)
    return category, posts, total


def tag_page(
    db: Session,
    key: int | str,
    *,
    admin: bool = False,
    page: int = 1,
    per_page: int | None = None,
) -> tuple[Tag, list[Post], int]:
    """Return a tag, one page of its blog posts and their total count."""
    tag = fetch_one(db, by_id_or_url(TAGS, key))
    q = POSTS.admin(admin).by_type(POST_TYPE_BLOG).having_related("tags", id=tag.id)
    posts = fetch_all(db, q.paginate(page, per_page or settings.posts_per_page))
    return tag, posts, count(db, q)


def _tag_titles(tags: str | Iterable[str] | None) -> list[str]:
    return split_tag_titles(tags) if isinstance(tags, str) or tags is None else list(tags)


def _check_status(status: str | None) -> None:
    if status is not None and status not in POST_STATUSES:
        raise ValidationFailure(f"Unknown post status {status!r}", field="status")


def create_post(
    db: Session,
    author: User | None,
    *,
    title: str,
    markdown: str,
    url: str | None = None,
    status: str = STATUS_DRAFT,
    post_type: str = POST_TYPE_BLOG,
    category_id: int | None = None,
    parent_id: int | None = None,
    tags: str | Iterable[str] | None = None,
) -> Post:
    """Create a post and attach its tags.

    Without an explicit ``url`` a free one is derived from the title.
    """
    title = (title or "").strip()
    if not title:
        raise ValidationFailure("Title is required", field="title")
    _check_status(status)
    url = (url or "").strip() or unique_url(db, EntityType.POST, slug_from_title(title))
    post = insert(
        db,
        Post(
            title=title,
            url=url,
            markdown=markdown,
            status=status,
            type=post_type,
            category_id=category_id,
            parent_id=parent_id,
            user_id=author.id if author is not None else None,
        ),
    )
    add_tags_to_post(db, post, _tag_titles(tags))
    logger.info("Created post %s (%s)", post.id, post.url)
    return post


def edit_post(
    db: Session,
    post_id: int | str,
    *,
    tags: str | Iterable[str] | None = None,
    remove_tag_ids: Iterable[int | str] = (),
    **fields: Any,
) -> Post:
    """Overwrite the given fields of a post, then add and remove tags.

    Raises:
        NotFound: If the post does not exist.
    """
    _check_status(fields.get("status"))
    if "url" in fields and not (fields["url"] or "").strip():
        title = fields.get("title") or fetch_one(db, Query(EntityType.POST).by_id(post_id)).title
        fields["url"] = unique_url(
            db, EntityType.POST, slug_from_title(title), exclude_id=safe_int(post_id)
        )
    post = update(db, Post(id=safe_int(post_id), **fields))
    add_tags_to_post(db, post, _tag_titles(tags))
    remove_tags_from_post(db, post, remove_tag_ids)
    return post


def replace_post_tags(db: Session, post_id: int | str, tags: str | Iterable[str] | None) -> list[Tag]:
    """Make ``tags`` the complete tag set of a post, detaching every other tag.

    Raises:
        NotFound: If the post does not exist.
    """
    post = fetch_one(db, Query(EntityType.POST).by_id(post_id))
    return set_post_tags(db, post, _tag_titles(tags))


def delete_post(db: Session, post_id: int | str) -> None:
    """Delete a post together with its comments and tag links."""
    post = fetch_one(db, Query(EntityType.POST).by_id(post_id))
    delete(db, post)
