"""Insert, update, delete and insert-or-select for any mapped entity.

Every write validates required columns, runs the entity type's before-save
hook and flushes immediately so ids are assigned and constraint failures
surface at the call site as :class:`ConstraintViolation`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cow_blog.core.errors import ConstraintViolation, NotFound, ValidationFailure
from cow_blog.db.hooks import before_save
from cow_blog.db.query import Query, fetch_first
from cow_blog.db.schema import EntityType, entity_type_of, model_for

__all__ = ["insert", "update", "delete", "insert_or_select", "validate_required"]

logger = logging.getLogger(__name__)


def validate_required(entity: Any, partial: bool = False) -> None:
    """Check that no NOT NULL column is missing or explicitly ``None``.

    A column left unset is fine when it has a default, when the row is
    already stored and the column was not loaded, or when ``partial`` is set
    (a change set that only names the fields it touches). An explicit
    ``None`` is always rejected.

    Raises:
        ValidationFailure: Naming the first missing column.
    """
    state = inspect(entity)
    mapper = state.mapper
    table = mapper.local_table.name
    for attr in mapper.column_attrs:
        column = attr.columns[0]
        if column.primary_key or column.nullable:
            continue
        if attr.key not in state.dict:
            has_default = column.default is not None or column.server_default is not None
            if partial or has_default or state.has_identity:
                continue
        elif state.dict[attr.key] is not None:
            continue
        raise ValidationFailure(f"{table}.{attr.key} is required", field=attr.key)


def _flush(db: Session, entity_type: EntityType) -> None:
    try:
        db.flush()
    except IntegrityError as err:
        logger.debug("Constraint violation writing %s: %s", entity_type.value, err.orig)
        raise ConstraintViolation(f"Could not write {entity_type.value}: {err.orig}") from err


def insert(db: Session, entity: Any) -> Any:
    """Persist a new entity and return it with its id assigned."""
    entity_type = entity_type_of(entity)
    validate_required(entity)
    before_save(entity_type, entity)
    db.add(entity)
    _flush(db, entity_type)
    return entity


def update(db: Session, entity: Any) -> Any:
    """Overwrite the stored row that shares ``entity``'s id.

    ``entity`` may be the persistent instance itself or a detached/transient
    one carrying only the fields to change. Returns the persistent instance.

    Raises:
        NotFound: If no row has the entity's id.
    """
    entity_type = entity_type_of(entity)
    model = type(entity)
    entity_id = getattr(entity, "id", None)
    stored = db.get(model, entity_id) if entity_id is not None else None
    if stored is None:
        raise NotFound(f"No {entity_type.value} row with id {entity_id!r}")
    if stored is not entity:
        validate_required(entity, partial=True)
        stored = db.merge(entity)
    validate_required(stored)
    before_save(entity_type, stored)
    _flush(db, entity_type)
    return stored


def delete(db: Session, entity: Any) -> None:
    """Remove the row with ``entity``'s id. Deleting a missing row is a no-op."""
    entity_type = entity_type_of(entity)
    if inspect(entity).persistent:
        stored = entity
    else:
        entity_id = getattr(entity, "id", None)
        stored = db.get(type(entity), entity_id) if entity_id is not None else None
        if stored is None:
            return
    db.delete(stored)
    _flush(db, entity_type)


def insert_or_select(
    db: Session,
    entity_type: EntityType,
    candidate: Mapping[str, Any],
    lookup: Mapping[str, Any] | None = None,
) -> Any:
    """Return the row matching ``lookup``, inserting ``candidate`` if there is none.

    ``lookup`` defaults to every field of ``candidate``. The insert runs in a
    savepoint; if a concurrent writer wins the race the savepoint is rolled
    back and the lookup is repeated once.

    Raises:
        ConstraintViolation: If the insert fails and the lookup still finds nothing.
    """
    wanted = Query(entity_type).filter(**(candidate if lookup is None else lookup))
    existing = fetch_first(db, wanted)
    if existing is not None:
        return existing

    entity = model_for(entity_type)(**candidate)
    validate_required(entity)
    before_save(entity_type, entity)
    try:
        with db.begin_nested():
            db.add(entity)
    except IntegrityError as err:
        existing = fetch_first(db, wanted)
        if existing is None:
            raise ConstraintViolation(
                f"Could not insert {entity_type.value}: {err.orig}"
            ) from err
        logger.warning("Lost insert race on %s, using existing row %s", entity_type.value, existing.id)
        return existing
    return entity
