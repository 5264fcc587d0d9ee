"""SQLAlchemy model for admin accounts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cow_blog.db.session import Base

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .post import Post


class User(Base):
    """Blog author. ``password`` holds sha256(password + salt) as hex."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)
    salt: Mapped[str] = mapped_column(Text, nullable=False)

    posts: Mapped[list[Post]] = relationship(back_populates="user")
