# tests/conftest.py
from __future__ import annotations

import base64
import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cow_blog.db.persistence import insert
from cow_blog.db.session import Base
from cow_blog.db.session import get_db as app_get_session
from cow_blog.main import app as fastapi_app
from cow_blog.models import Category, Post, User
from cow_blog.models.post import POST_TYPE_BLOG, STATUS_DRAFT, STATUS_PUBLIC
from cow_blog.services.user_service import create_user

TEST_DB_URL = "sqlite://"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "moo-moo"

_BASE_DATE = datetime(2024, 1, 1, tzinfo=UTC)
_POST_DATE_COUNTER = count(1)


def next_post_date() -> datetime:
    """Return a strictly increasing creation date for test posts."""
    return _BASE_DATE + timedelta(hours=next(_POST_DATE_COUNTER))


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite issues its own BEGIN lazily, which breaks SAVEPOINT handling.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    TestingSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        # Commits inside the code under test only release a savepoint.
        join_transaction_mode="create_savepoint",
    )
    session = TestingSession()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def user(db_session: Session) -> User:
    """Create and return the blog author."""
    return create_user(db_session, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture()
def admin_auth(user: User) -> dict[str, str]:
    """Return HTTP Basic headers for the blog author."""
    token = base64.b64encode(f"{ADMIN_USERNAME}:{ADMIN_PASSWORD}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture()
def category(db_session: Session) -> Category:
    """Create a default category."""
    return insert(db_session, Category(title="Programming", url="programming"))


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory inserting posts whose url is the hyphenated, lowercased title."""

    def _make_post(
        title: str,
        *,
        status: str = STATUS_PUBLIC,
        post_type: str = POST_TYPE_BLOG,
        **fields: Any,
    ) -> Post:
        fields.setdefault("markdown", f"Body of *{title}*")
        fields.setdefault("date_created", next_post_date())
        return insert(
            db_session,
            Post(
                title=title,
                url=title.lower().replace(" ", "-"),
                status=status,
                type=post_type,
                **fields,
            ),
        )

    return _make_post


@pytest.fixture()
def post(make_post: Callable[..., Post], user: User, category: Category) -> Post:
    """Create a public blog post in the default category."""
    return make_post("Hello World", user_id=user.id, category_id=category.id)


@pytest.fixture()
def draft_post(make_post: Callable[..., Post], user: User, category: Category) -> Post:
    """Create a draft blog post in the default category."""
    return make_post(
        "Secret Plans",
        status=STATUS_DRAFT,
        user_id=user.id,
        category_id=category.id,
    )
