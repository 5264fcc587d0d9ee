"""Keep a post's tag set in sync with the post_tags join table."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cow_blog.core.settings import settings
from cow_blog.db.persistence import delete, insert_or_select
from cow_blog.db.query import POST_TAGS, TAGS, fetch_all, fetch_first, safe_int
from cow_blog.db.schema import EntityType
from cow_blog.models import Post, Tag
from cow_blog.services.slug import tag_from_title, unique_url

__all__ = [
    "add_tags_to_post",
    "find_tag_by_title",
    "remove_tags_from_post",
    "set_post_tags",
    "split_tag_titles",
]

logger = logging.getLogger(__name__)


def split_tag_titles(text: str | None) -> list[str]:
    """Split a comma-separated tag field into distinct, non-blank titles."""
    if not text:
        return []
    titles = (part.strip() for part in text.split(","))
    return list(dict.fromkeys(title for title in titles if title))


def find_tag_by_title(db: Session, title: str) -> Tag | None:
    """Return the tag named ``title``.

    Matching is exact unless ``TAG_TITLES_CASE_SENSITIVE`` is turned off.
    """
    if settings.tag_titles_case_sensitive:
        return fetch_first(db, TAGS.by_title(title))
    stmt = select(Tag).where(func.lower(Tag.title) == title.lower()).order_by(Tag.id).limit(1)
    return db.scalars(stmt).first()


def _expire_tags(db: Session, post: Post) -> None:
    if post in db:
        db.expire(post, ["tags", "tag_links"])


def add_tags_to_post(db: Session, post: Post, tag_titles: Iterable[str]) -> list[Tag]:
    """Attach the named tags to ``post``, creating missing tags.

    Re-adding a tag the post already has only costs a lookup.
    """
    tags: list[Tag] = []
    for raw_title in tag_titles:
        title = raw_title.strip()
        if not title:
            continue
        tag = find_tag_by_title(db, title)
        if tag is None:
            wanted = tag_from_title(title)
            wanted["url"] = unique_url(db, EntityType.TAG, wanted["url"])
            tag = insert_or_select(db, EntityType.TAG, wanted, lookup={"title": title})
            logger.debug("Tag %r resolved to id %s", title, tag.id)
        insert_or_select(db, EntityType.POST_TAG, {"post_id": post.id, "tag_id": tag.id})
        tags.append(tag)
    _expire_tags(db, post)
    return tags


def remove_tags_from_post(db: Session, post: Post, tag_ids: Iterable[int | str]) -> None:
    """Detach the given tags from ``post``. Tags it does not carry are ignored."""
    for tag_id in tag_ids:
        link = fetch_first(db, POST_TAGS.filter(post_id=post.id, tag_id=safe_int(tag_id)))
        if link is not None:
            delete(db, link)
    _expire_tags(db, post)


def set_post_tags(db: Session, post: Post, tag_titles: Iterable[str]) -> list[Tag]:
    """Make the named tags the complete tag set of ``post``."""
    tags = add_tags_to_post(db, post, tag_titles)
    keep = {tag.id for tag in tags}
    stale = [
        link.tag_id
        for link in fetch_all(db, POST_TAGS.filter(post_id=post.id))
        if link.tag_id not in keep
    ]
    remove_tags_from_post(db, post, stale)
    return tags
