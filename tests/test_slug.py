# tests/test_slug.py
import pytest

from cow_blog.db.persistence import insert
from cow_blog.db.schema import EntityType
from cow_blog.models import Category, Tag
from cow_blog.services.slug import (
    category_from_title,
    slug_from_title,
    tag_from_title,
    unique_url,
)

TITLES = [
    "Hello, World! / Foo",
    "Clojure",
    "  leading and trailing  ",
    "already-a-slug",
    "Ünïcode Títle",
    "multiple   spaces -- and --- dashes",
    "İstanbul",
    "C++ & Rust",
    "",
]


def test_slug_from_title_example() -> None:
    assert slug_from_title("Hello, World! / Foo") == "hello-world-foo"


@pytest.mark.parametrize("title", TITLES)
def test_slug_from_title_is_idempotent(title: str) -> None:
    once = slug_from_title(title)
    assert slug_from_title(once) == once


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Clojure", "clojure"),
        ("snake_case kept", "snake_case-kept"),
        ("C++ & Rust", "c-rust"),
        ("Café", "caf-"),
        ("  padded  ", "-padded-"),
    ],
)
def test_slug_from_title_replaces_disallowed_characters(title: str, expected: str) -> None:
    assert slug_from_title(title) == expected


def test_slug_from_title_custom_pattern() -> None:
    assert slug_from_title("a.b c", pattern=r"[a-z.\s]") == "a.b-c"


def test_term_fields_from_title() -> None:
    assert tag_from_title("Lisp Macros") == {"title": "Lisp Macros", "url": "lisp-macros"}
    assert category_from_title("Misc.") == {"title": "Misc.", "url": "misc-"}


def test_unique_url_suffixes_taken_urls(db_session) -> None:
    assert unique_url(db_session, EntityType.TAG, "cows") == "cows"

    insert(db_session, Tag(title="Cows", url="cows"))
    insert(db_session, Tag(title="cows", url="cows-2"))

    assert unique_url(db_session, EntityType.TAG, "cows") == "cows-3"
    # Other entity types have their own url space.
    assert unique_url(db_session, EntityType.CATEGORY, "cows") == "cows"


def test_unique_url_ignores_the_row_being_edited(db_session) -> None:
    category = insert(db_session, Category(title="Cows", url="cows"))

    assert unique_url(db_session, EntityType.CATEGORY, "cows", exclude_id=category.id) == "cows"
