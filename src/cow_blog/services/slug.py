"""Derive URL-safe slugs from human-readable titles."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from cow_blog.core.settings import settings
from cow_blog.db.query import Query, fetch_first
from cow_blog.db.schema import EntityType

_SEPARATOR_RUN = re.compile(r"[\s-]+")


@lru_cache(maxsize=8)
def _allowed(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


def slug_from_title(title: str, pattern: str | None = None) -> str:
    """Turn ``title`` into a lowercase, hyphen-separated slug.

    Characters outside the allowed class (``TAG_CATEGORY_TITLE_REGEX`` unless
    ``pattern`` is given) become hyphens, then runs of whitespace and hyphens
    collapse into one hyphen. Lowercasing happens first so that characters
    whose lowercase form expands are filtered too, which keeps the function
    idempotent.

    >>> slug_from_title("Hello, World! / Foo")
    'hello-world-foo'
    """
    allowed = _allowed(pattern or settings.tag_category_title_regex)
    kept = "".join(ch if allowed.fullmatch(ch) else "-" for ch in title.lower())
    return _SEPARATOR_RUN.sub("-", kept)


def tag_from_title(title: str) -> dict[str, Any]:
    """Return the fields of a new tag named ``title``."""
    return {"title": title, "url": slug_from_title(title)}


def category_from_title(title: str) -> dict[str, Any]:
    """Return the fields of a new category named ``title``."""
    return {"title": title, "url": slug_from_title(title)}


def unique_url(
    db: Session,
    entity_type: EntityType,
    url: str,
    exclude_id: int | None = None,
) -> str:
    """Return ``url``, suffixed with ``-2``, ``-3``, ... until no other row uses it."""
    candidate = url
    suffix = 1
    while True:
        clash = fetch_first(db, Query(entity_type).by_url(candidate).only("id"))
        if clash is None or clash.id == exclude_id:
            return candidate
        suffix += 1
        candidate = f"{url}-{suffix}"
