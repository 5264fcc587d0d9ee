"""Bring cached comment and post counts back in line with the live rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from cow_blog.db.persistence import update
from cow_blog.db.query import Query, fetch_all
from cow_blog.db.schema import EntityType
from cow_blog.models.post import POST_TYPE_BLOG

__all__ = ["CountUpdates", "update_counts"]

logger = logging.getLogger(__name__)


@dataclass
class CountUpdates:
    """How many rows ``update_counts`` rewrote, per entity type."""

    posts: int = 0
    categories: int = 0
    tags: int = 0

    @property
    def total(self) -> int:
        return self.posts + self.categories + self.tags


_POSTS_WITH_PUBLIC_COMMENTS = (
    Query(EntityType.POST)
    .only("id", "num_comments")
    .include("comments", Query(EntityType.COMMENT).only("id", "post_id").admin(False))
)

_BLOG_POSTS = Query(EntityType.POST).only("id", "category_id").by_type(POST_TYPE_BLOG)

_CATEGORIES_WITH_POSTS = (
    Query(EntityType.CATEGORY)
    .only("id", "num_posts")
    .include("posts", _BLOG_POSTS)
)

_TAGS_WITH_POSTS = (
    Query(EntityType.TAG)
    .only("id", "num_posts")
    .include("posts", _BLOG_POSTS.only("id"))
)


def update_counts(db: Session) -> CountUpdates:
    """Recount comments per post and blog posts per category and tag.

    Only rows whose cached value differs are written, so the scan is
    idempotent. It must not run concurrently with itself.
    """
    updates = CountUpdates()

    for post in fetch_all(db, _POSTS_WITH_PUBLIC_COMMENTS):
        live = len(post.comments)
        if post.num_comments != live:
            logger.debug("posts.%s num_comments %s -> %s", post.id, post.num_comments, live)
            post.num_comments = live
            update(db, post)
            updates.posts += 1

    for term_query, field in ((_CATEGORIES_WITH_POSTS, "categories"), (_TAGS_WITH_POSTS, "tags")):
        for term in fetch_all(db, term_query):
            live = len(term.posts)
            if term.num_posts != live:
                logger.debug("%s.%s num_posts %s -> %s", field, term.id, term.num_posts, live)
                term.num_posts = live
                update(db, term)
                setattr(updates, field, getattr(updates, field) + 1)

    logger.info(
        "update_counts rewrote %d posts, %d categories, %d tags",
        updates.posts,
        updates.categories,
        updates.tags,
    )
    return updates
