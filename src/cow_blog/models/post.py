"""SQLAlchemy model for blog posts."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cow_blog.db.session import Base
from cow_blog.db.time import utcnow

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .category import Category
    from .comment import Comment
    from .tag import PostTag, Tag
    from .user import User

STATUS_PUBLIC = "public"
STATUS_DRAFT = "draft"

POST_TYPE_BLOG = "blog"
POST_TYPE_PAGE = "page"


class Post(Base):
    """A blog entry or a standalone page.

    ``html`` is derived from ``markdown`` by the before-save hook and is
    never edited directly. ``num_comments`` is a cache maintained by
    ``update_counts``.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    markdown: Mapped[str] = mapped_column(Text, nullable=False)
    html: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_DRAFT)
    type: Mapped[str] = mapped_column(Text, nullable=False, default=POST_TYPE_BLOG)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    num_comments: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Pages may hang off another post; top-level posts have parent_id = NULL.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="SET NULL"),
        nullable=True,
    )
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    category: Mapped[Category | None] = relationship(back_populates="posts")
    user: Mapped[User | None] = relationship(back_populates="posts")
    parent: Mapped[Post | None] = relationship(remote_side="Post.id")
    comments: Mapped[list[Comment]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="Comment.date_created",
    )
    # Join rows are written explicitly through PostTag; this side is read-only.
    tags: Mapped[list[Tag]] = relationship(
        secondary="post_tags",
        viewonly=True,
        order_by="Tag.title",
    )
    tag_links: Mapped[list[PostTag]] = relationship(
        back_populates="post",
        cascade="all, delete-orphan",
    )
