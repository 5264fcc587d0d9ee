"""Before-save hooks, resolved statically by entity type."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from sqlalchemy import inspect

from cow_blog.db.schema import EntityType
from cow_blog.services.rendering import markdown_to_html

BeforeSave = Callable[[Any], None]


def _markdown_loaded(entity: Any) -> bool:
    # Rows fetched without their markdown column keep their stored html.
    return "markdown" not in inspect(entity).unloaded


def render_post(post: Any) -> None:
    if _markdown_loaded(post):
        post.html = markdown_to_html(post.markdown, comment=False)


def render_comment(comment: Any) -> None:
    if _markdown_loaded(comment):
        comment.html = markdown_to_html(comment.markdown, comment=True)


def no_hook(entity: Any) -> None:
    return None


BEFORE_SAVE: Mapping[EntityType, BeforeSave] = MappingProxyType(
    {
        EntityType.POST: render_post,
        EntityType.COMMENT: render_comment,
        EntityType.CATEGORY: no_hook,
        EntityType.TAG: no_hook,
        EntityType.POST_TAG: no_hook,
        EntityType.USER: no_hook,
    }
)


def before_save(entity_type: EntityType, entity: Any) -> None:
    """Apply the before-save hook registered for ``entity_type``."""
    BEFORE_SAVE[entity_type](entity)
