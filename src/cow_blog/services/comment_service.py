"""Service layer for comments."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from cow_blog.core.errors import ValidationFailure
from cow_blog.core.settings import settings
from cow_blog.db.persistence import delete, insert, update
from cow_blog.db.query import COMMENTS, Query, count, fetch_all, fetch_one, safe_int
from cow_blog.db.schema import EntityType
from cow_blog.models.comment import DEFAULT_AUTHOR, Comment
from cow_blog.models.post import STATUS_DRAFT, STATUS_PUBLIC

__all__ = [
    "COMMENT_STATUSES",
    "add_comment",
    "list_comments",
    "count_comments",
    "get_comment",
    "edit_comment",
    "delete_comment",
]

logger = logging.getLogger(__name__)

COMMENT_STATUSES = (STATUS_PUBLIC, STATUS_DRAFT)


def add_comment(
    db: Session,
    post_id: int | str,
    *,
    markdown: str,
    author: str | None = None,
    email: str | None = None,
    homepage: str | None = None,
    ip: str | None = None,
) -> Comment:
    """Attach a public comment to a public post.

    Raises:
        NotFound: If the post does not exist or is not public.
        ValidationFailure: If the comment body is blank.
    """
    if not (markdown or "").strip():
        raise ValidationFailure("Comment text is required", field="markdown")
    post = fetch_one(db, Query(EntityType.POST).by_id(post_id).admin(False).only("id"))
    comment = insert(
        db,
        Comment(
            post_id=post.id,
            author=(author or "").strip() or DEFAULT_AUTHOR,
            email=(email or "").strip() or None,
            homepage=(homepage or "").strip() or None,
            markdown=markdown,
            ip=ip,
            status=STATUS_PUBLIC,
        ),
    )
    logger.info("Comment %s added to post %s from %s", comment.id, post.id, ip)
    return comment


def list_comments(
    db: Session,
    *,
    admin: bool = False,
    page: int = 1,
    per_page: int | None = None,
) -> list[Comment]:
    """Return one page of comments across all posts, newest first."""
    q = COMMENTS.admin(admin).order_by("date_created desc")
    return fetch_all(db, q.paginate(page, per_page or settings.posts_per_page))


def count_comments(db: Session, *, admin: bool = False) -> int:
    return count(db, COMMENTS.admin(admin))


def get_comment(db: Session, comment_id: int | str, *, admin: bool = False) -> Comment:
    return fetch_one(db, COMMENTS.admin(admin).by_id(comment_id))


def edit_comment(db: Session, comment_id: int | str, **fields: Any) -> Comment:
    """Overwrite the given fields of a comment.

    Raises:
        NotFound: If the comment does not exist.
    """
    status = fields.get("status")
    if status is not None and status not in COMMENT_STATUSES:
        raise ValidationFailure(f"Unknown comment status {status!r}", field="status")
    return update(db, Comment(id=safe_int(comment_id), **fields))


def delete_comment(db: Session, comment_id: int | str) -> None:
    delete(db, fetch_one(db, Query(EntityType.COMMENT).by_id(comment_id)))
