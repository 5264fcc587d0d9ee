"""Static relationship table for every entity type.

Each entity type maps to its ORM model and to the relations the query
builder may eager-load. The table is built once at import time and never
mutated; ``tests/test_schema.py`` checks that it agrees with the ORM mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any

from cow_blog.models import Category, Comment, Post, PostTag, Tag, User


class EntityType(str, Enum):
    """Closed set of persisted entity types, valued by table name."""

    POST = "posts"
    COMMENT = "comments"
    CATEGORY = "categories"
    TAG = "tags"
    POST_TAG = "post_tags"
    USER = "users"


class RelationKind(str, Enum):
    """Cardinality of a relation as seen from the owning entity."""

    BELONGS_TO = "belongs-to"
    HAS_MANY = "has-many"
    HABTM = "habtm"


@dataclass(frozen=True)
class Relation:
    """One edge of the schema graph.

    Attributes:
        kind: Cardinality of the relation.
        target: Entity type on the other end.
        alias: Attribute name the related entities are exposed under.
        foreign_key: Column holding the key. For ``belongs-to`` it lives on
            the owner, for ``has-many`` on the target, for ``habtm`` on the
            join table and points back at the owner.
        via: Join table for ``habtm`` relations.
    """

    kind: RelationKind
    target: EntityType
    alias: str
    foreign_key: str
    via: EntityType | None = None

    @property
    def is_collection(self) -> bool:
        return self.kind is not RelationKind.BELONGS_TO


@dataclass(frozen=True)
class EntitySchema:
    """Storage model and relations of a single entity type."""

    entity: EntityType
    model: type[Any]
    relations: tuple[Relation, ...] = ()

    @property
    def table(self) -> str:
        return self.entity.value

    def relation(self, alias: str) -> Relation:
        """Return the relation exposed under ``alias``.

        Raises:
            ValueError: If the entity type has no such relation.
        """
        for relation in self.relations:
            if relation.alias == alias:
                return relation
        raise ValueError(f"{self.table} has no relation named {alias!r}")


BELONGS_TO = RelationKind.BELONGS_TO
HAS_MANY = RelationKind.HAS_MANY
HABTM = RelationKind.HABTM

SCHEMA: Mapping[EntityType, EntitySchema] = MappingProxyType(
    {
        EntityType.POST: EntitySchema(
            EntityType.POST,
            Post,
            (
                Relation(BELONGS_TO, EntityType.CATEGORY, "category", "category_id"),
                Relation(BELONGS_TO, EntityType.USER, "user", "user_id"),
                Relation(HAS_MANY, EntityType.COMMENT, "comments", "post_id"),
                Relation(HABTM, EntityType.TAG, "tags", "post_id", via=EntityType.POST_TAG),
                Relation(BELONGS_TO, EntityType.POST, "parent", "parent_id"),
            ),
        ),
        EntityType.COMMENT: EntitySchema(
            EntityType.COMMENT,
            Comment,
            (Relation(BELONGS_TO, EntityType.POST, "post", "post_id"),),
        ),
        EntityType.CATEGORY: EntitySchema(
            EntityType.CATEGORY,
            Category,
            (Relation(HAS_MANY, EntityType.POST, "posts", "category_id"),),
        ),
        EntityType.TAG: EntitySchema(
            EntityType.TAG,
            Tag,
            (Relation(HABTM, EntityType.POST, "posts", "tag_id", via=EntityType.POST_TAG),),
        ),
        EntityType.POST_TAG: EntitySchema(
            EntityType.POST_TAG,
            PostTag,
            (
                Relation(BELONGS_TO, EntityType.POST, "post", "post_id"),
                Relation(BELONGS_TO, EntityType.TAG, "tag", "tag_id"),
            ),
        ),
        EntityType.USER: EntitySchema(
            EntityType.USER,
            User,
            (Relation(HAS_MANY, EntityType.POST, "posts", "user_id"),),
        ),
    }
)

_ENTITY_BY_MODEL: Mapping[type[Any], EntityType] = MappingProxyType(
    {schema.model: entity for entity, schema in SCHEMA.items()}
)


def entity_schema(entity: EntityType) -> EntitySchema:
    """Return the schema entry for an entity type."""
    return SCHEMA[entity]


def model_for(entity: EntityType) -> type[Any]:
    """Return the ORM model backing an entity type."""
    return SCHEMA[entity].model


def entity_type_of(obj: Any) -> EntityType:
    """Return the entity type of an ORM instance or model class.

    Raises:
        TypeError: If ``obj`` is not one of the mapped models.
    """
    model = obj if isinstance(obj, type) else type(obj)
    try:
        return _ENTITY_BY_MODEL[model]
    except KeyError:
        raise TypeError(f"{model.__name__} is not a mapped entity type") from None
