"""Account creation and credential checks for blog authors."""

from __future__ import annotations

import hashlib
import secrets
import uuid

from sqlalchemy.orm import Session

from cow_blog.core.errors import ValidationFailure
from cow_blog.db.persistence import insert
from cow_blog.db.query import USERS, fetch_first
from cow_blog.models.user import User

__all__ = ["sha256_hex", "create_user", "check_user"]


def sha256_hex(value: str) -> str:
    """Return the hex SHA-256 digest of ``value``."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def create_user(db: Session, username: str, password: str) -> User:
    """Persist a new user with a freshly salted password hash."""
    username = (username or "").strip()
    if not username:
        raise ValidationFailure("Username is required", field="username")
    if not password:
        raise ValidationFailure("Password is required", field="password")
    salt = sha256_hex(str(uuid.uuid4()))
    user = User(username=username, password=sha256_hex(password + salt), salt=salt)
    return insert(db, user)


def check_user(db: Session, username: str, password: str) -> User | None:
    """Return the user if ``password`` matches, otherwise None."""
    user = fetch_first(db, USERS.filter(username=username))
    if user is None:
        return None
    if secrets.compare_digest(user.password, sha256_hex(password + user.salt)):
        return user
    return None
