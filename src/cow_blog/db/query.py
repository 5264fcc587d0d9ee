"""Composable query descriptions and their execution.

A :class:`Query` describes what to fetch (entity type, equality predicates,
related-row filters, eager loads, column projection, ordering, page) without
touching the database. Every filter returns a new description, so predefined queries
such as :data:`POSTS` can be shared freely and refined per request::

    post = fetch_one(db, POSTS.by_url("hello-world").admin(is_admin))

Related entities named in ``includes`` are loaded with one extra ``SELECT
... WHERE fk IN (...)`` per relation, batched over the primary result set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, defer, load_only, selectinload

from cow_blog.core.errors import NotFound, ValidationFailure
from cow_blog.db.schema import EntitySchema, EntityType, entity_schema
from cow_blog.models.post import STATUS_PUBLIC

__all__ = [
    "Include",
    "Query",
    "build_statement",
    "count",
    "fetch_all",
    "fetch_first",
    "fetch_one",
    "paginate",
    "query",
    "safe_int",
    "POSTS",
    "COMMENTS",
    "CATEGORIES",
    "TAGS",
    "USERS",
    "POST_TAGS",
]

logger = logging.getLogger(__name__)

STATUS_COLUMN = "status"


def safe_int(value: Any) -> int:
    """Coerce an identifier taken from a URL or form into an int.

    Raises:
        ValidationFailure: If the value is not an integer.
    """
    if isinstance(value, bool):
        raise ValidationFailure(f"Invalid id: {value!r}", field="id")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as err:
        raise ValidationFailure(f"Invalid id: {value!r}", field="id") from err


@dataclass(frozen=True)
class Include:
    """Eager load of the relation ``alias``, optionally refined by ``query``.

    The nested query's predicates, projection and own includes apply to the
    related fetch. Ordering of an included collection follows the
    relationship's ``order_by``.
    """

    alias: str
    query: Query | None = None


@dataclass(frozen=True)
class Query:
    """Immutable description of a fetch against one entity type."""

    entity: EntityType
    where: tuple[tuple[str, Any], ...] = ()
    related: tuple[Include, ...] = ()
    includes: tuple[Include, ...] = ()
    columns: tuple[str, ...] | None = None
    except_columns: tuple[str, ...] = ()
    order: tuple[str, ...] = ()
    limit: int | None = None
    offset: int | None = None

    @property
    def predicates(self) -> dict[str, Any]:
        """Return the equality predicates as a fresh dict."""
        return dict(self.where)

    def filter(self, **predicates: Any) -> Query:
        """Add equality predicates, replacing any earlier value for the same column."""
        merged = {**dict(self.where), **predicates}
        return replace(self, where=tuple(merged.items()))

    def unfilter(self, *columns: str) -> Query:
        """Drop the predicates on the given columns, if present."""
        kept = {k: v for k, v in self.where if k not in columns}
        return replace(self, where=tuple(kept.items()))

    def by_id(self, value: Any) -> Query:
        return self.filter(id=safe_int(value))

    def by_url(self, url: str) -> Query:
        return self.filter(url=url)

    def by_title(self, title: str) -> Query:
        return self.filter(title=title)

    def by_type(self, post_type: str) -> Query:
        return self.filter(type=post_type)

    def admin(self, admin: bool) -> Query:
        """Scope the query to what an admin (or an anonymous reader) may see.

        Admins see every status and every column; everyone else sees only
        public rows.
        """
        if admin:
            return replace(self.unfilter(STATUS_COLUMN), except_columns=())
        return self.filter(**{STATUS_COLUMN: STATUS_PUBLIC})

    def having_related(self, alias: str, **predicates: Any) -> Query:
        """Keep rows with at least one ``alias`` entity matching ``predicates``.

        Runs as an ``EXISTS`` subquery, so pagination and :func:`count` stay
        in SQL.
        """
        target = self.schema.relation(alias).target
        nested = Query(target).filter(**predicates)
        return replace(self, related=(*self.related, Include(alias, nested)))

    def include(self, alias: str, query: Query | None = None) -> Query:
        """Eager-load the relation ``alias``, replacing an earlier include of it."""
        kept = tuple(inc for inc in self.includes if inc.alias != alias)
        return replace(self, includes=(*kept, Include(alias, query)))

    def only(self, *columns: str) -> Query:
        """Restrict the loaded columns. The primary key is always loaded."""
        return replace(self, columns=tuple(columns))

    def without(self, *columns: str) -> Query:
        """Exclude columns from the loaded entities."""
        return replace(self, except_columns=tuple(dict.fromkeys((*self.except_columns, *columns))))

    def order_by(self, *clauses: str) -> Query:
        """Order by clauses of the form ``"column"`` or ``"column desc"``."""
        return replace(self, order=tuple(clauses))

    def paginate(self, page_number: int, per_page: int) -> Query:
        """Slice the results to the 1-based ``page_number``.

        Out-of-range pages are not clamped and simply match nothing.
        """
        return replace(self, limit=per_page, offset=(page_number - 1) * per_page)

    def unpaginated(self) -> Query:
        return replace(self, limit=None, offset=None)

    @property
    def schema(self) -> EntitySchema:
        return entity_schema(self.entity)


def query(entity: EntityType) -> Query:
    """Return an unfiltered query over ``entity``."""
    return Query(entity)


def paginate(q: Query, page_number: int, per_page: int) -> Query:
    return q.paginate(page_number, per_page)


def _column(schema: EntitySchema, name: str) -> Any:
    try:
        return schema.model.__table__.c[name]
    except KeyError:
        raise ValueError(f"{schema.table} has no column named {name!r}") from None


def _attribute(schema: EntitySchema, name: str) -> Any:
    _column(schema, name)
    return getattr(schema.model, name)


def _criteria(q: Query) -> list[Any]:
    clauses = []
    for name, value in q.where:
        column = _attribute(q.schema, name)
        clauses.append(column.is_(None) if value is None else column == value)
    for inc in q.related:
        relation = q.schema.relation(inc.alias)
        attr = getattr(q.schema.model, relation.alias)
        nested = _criteria(inc.query)
        clauses.append(attr.any(*nested) if relation.is_collection else attr.has(*nested))
    return clauses


def _column_options(q: Query) -> list[Any]:
    options: list[Any] = []
    excluded = set(q.except_columns)
    if q.columns is not None:
        kept = [_attribute(q.schema, name) for name in q.columns if name not in excluded]
        options.append(load_only(*kept))
    for name in q.except_columns:
        options.append(defer(_attribute(q.schema, name), raiseload=True))
    return options


def _eager_option(schema: EntitySchema, include: Include) -> Any:
    relation = schema.relation(include.alias)
    nested = include.query or Query(relation.target)
    if nested.entity is not relation.target:
        raise ValueError(
            f"include {include.alias!r} expects a {relation.target.value} query, "
            f"got {nested.entity.value}"
        )
    attr = getattr(schema.model, relation.alias)
    criteria = _criteria(nested)
    if criteria:
        attr = attr.and_(*criteria)
    sub_options = [
        *_column_options(nested),
        *(_eager_option(nested.schema, inc) for inc in nested.includes),
    ]
    loader = selectinload(attr)
    if sub_options:
        loader = loader.options(*sub_options)
    return loader


def _order_clauses(q: Query) -> list[Any]:
    clauses = []
    for clause in q.order:
        name, _, direction = clause.strip().partition(" ")
        column = _attribute(q.schema, name)
        direction = direction.strip().lower()
        if direction == "desc":
            clauses.append(column.desc())
        elif direction in ("", "asc"):
            clauses.append(column.asc())
        else:
            raise ValueError(f"Unknown sort direction in {clause!r}")
    return clauses


def build_statement(q: Query) -> Select[Any]:
    """Compile a query description into a SQLAlchemy ``Select``."""
    stmt = select(q.schema.model).where(*_criteria(q))
    options = [*_column_options(q), *(_eager_option(q.schema, inc) for inc in q.includes)]
    if options:
        stmt = stmt.options(*options)
    order = _order_clauses(q)
    if order:
        stmt = stmt.order_by(*order)
    if q.limit is not None:
        stmt = stmt.limit(q.limit)
    if q.offset:
        stmt = stmt.offset(q.offset)
    if q.includes:
        # Refresh rows already in the identity map so eager-load criteria always apply.
        stmt = stmt.execution_options(populate_existing=True)
    return stmt


def fetch_all(db: Session, q: Query) -> list[Any]:
    """Execute ``q`` and return every matching entity in order."""
    return list(db.scalars(build_statement(q)))


def fetch_first(db: Session, q: Query) -> Any | None:
    """Execute ``q`` and return the first matching entity, or None."""
    stmt = build_statement(q)
    if q.limit is None:
        stmt = stmt.limit(1)
    return db.scalars(stmt).first()


def fetch_one(db: Session, q: Query) -> Any:
    """Execute ``q`` and return the first matching entity.

    Raises:
        NotFound: If nothing matches.
    """
    entity = fetch_first(db, q)
    if entity is None:
        logger.debug("No %s row matching %s", q.entity.value, q.predicates)
        raise NotFound(f"No {q.entity.value} row matching {q.predicates}")
    return entity


def count(db: Session, q: Query) -> int:
    """Return how many rows ``q`` matches, ignoring pagination."""
    model = q.schema.model
    stmt = select(func.count()).select_from(model).where(*_criteria(q))
    return int(db.scalar(stmt) or 0)


POSTS = (
    Query(EntityType.POST)
    .admin(False)
    .include("parent", Query(EntityType.POST).only("id", "title", "status", "type"))
    .include("tags")
    .include("category")
    .include("user", Query(EntityType.USER).only("id", "username"))
    .without("markdown")
    .order_by("date_created desc")
)

COMMENTS = (
    Query(EntityType.COMMENT)
    .admin(False)
    .without("markdown")
    .order_by("date_created asc")
)

CATEGORIES = Query(EntityType.CATEGORY).order_by("title")

TAGS = Query(EntityType.TAG).order_by("title")

USERS = Query(EntityType.USER)

POST_TAGS = Query(EntityType.POST_TAG)
