"""Admin operations on tags and categories."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from cow_blog.core.errors import ValidationFailure
from cow_blog.db.persistence import delete, insert, insert_or_select, update
from cow_blog.db.query import POST_TAGS, Query, fetch_all, fetch_one, safe_int
from cow_blog.db.schema import EntityType, model_for
from cow_blog.models import Category, Tag
from cow_blog.services.slug import slug_from_title, unique_url

__all__ = [
    "create_term",
    "edit_term",
    "delete_term",
    "merge_tags",
    "merge_categories",
]

logger = logging.getLogger(__name__)

TERM_TYPES = (EntityType.TAG, EntityType.CATEGORY)


def _check_term_type(entity_type: EntityType) -> None:
    if entity_type not in TERM_TYPES:
        raise ValueError(f"{entity_type.value} is not a tag or category type")


def _clean_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationFailure("Title is required", field="title")
    return title


def create_term(
    db: Session,
    entity_type: EntityType,
    title: str,
    url: str | None = None,
) -> Any:
    """Create a tag or category.

    An explicit ``url`` is stored as given, so a duplicate surfaces as
    ``ConstraintViolation``. Without one, a free url is derived from the title.
    """
    _check_term_type(entity_type)
    title = _clean_title(title)
    url = (url or "").strip() or unique_url(db, entity_type, slug_from_title(title))
    return insert(db, model_for(entity_type)(title=title, url=url))


def edit_term(
    db: Session,
    entity_type: EntityType,
    term_id: int | str,
    title: str,
    url: str | None = None,
) -> Any:
    """Rename a tag or category, re-deriving its url when none is given."""
    _check_term_type(entity_type)
    term_id = safe_int(term_id)
    title = _clean_title(title)
    url = (url or "").strip() or unique_url(
        db, entity_type, slug_from_title(title), exclude_id=term_id
    )
    return update(db, model_for(entity_type)(id=term_id, title=title, url=url))


def delete_term(db: Session, entity_type: EntityType, term_id: int | str) -> None:
    """Delete a tag (with its join rows) or a category (its posts become uncategorized)."""
    _check_term_type(entity_type)
    term = fetch_one(db, Query(entity_type).by_id(term_id))
    delete(db, term)


def _merge_pair(
    db: Session,
    entity_type: EntityType,
    from_id: int | str,
    to_id: int | str,
) -> tuple[Any, Any]:
    if safe_int(from_id) == safe_int(to_id):
        raise ValidationFailure("Cannot merge a term into itself", field="to_id")
    source = fetch_one(db, Query(entity_type).by_id(from_id))
    target = fetch_one(db, Query(entity_type).by_id(to_id))
    return source, target


def merge_tags(db: Session, from_id: int | str, to_id: int | str) -> Tag:
    """Move every post of one tag onto another, then delete the first tag."""
    source, target = _merge_pair(db, EntityType.TAG, from_id, to_id)
    links = fetch_all(db, POST_TAGS.filter(tag_id=source.id))
    for link in links:
        insert_or_select(db, EntityType.POST_TAG, {"post_id": link.post_id, "tag_id": target.id})
    delete(db, source)
    logger.info("Merged tag %s into %s (%d posts)", source.id, target.id, len(links))
    return target


def merge_categories(db: Session, from_id: int | str, to_id: int | str) -> Category:
    """Move every post of one category into another, then delete the first category."""
    source, target = _merge_pair(db, EntityType.CATEGORY, from_id, to_id)
    posts = fetch_all(db, Query(EntityType.POST).filter(category_id=source.id).only("id", "category_id"))
    for post in posts:
        post.category_id = target.id
        update(db, post)
    db.expire(source, ["posts"])
    delete(db, source)
    logger.info("Merged category %s into %s (%d posts)", source.id, target.id, len(posts))
    return target
