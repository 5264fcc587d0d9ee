"""SQLAlchemy model for post categories."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cow_blog.db.session import Base

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .post import Post


class Category(Base):
    """A post belongs to at most one category."""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    # Cached count of "blog" posts, refreshed by update_counts.
    num_posts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    posts: Mapped[list[Post]] = relationship(back_populates="category")
