"""SQLAlchemy models for tags and the post/tag join table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cow_blog.db.session import Base

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .post import Post


class Tag(Base):
    """Free-form label attached to any number of posts."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    # Cached count of "blog" posts, refreshed by update_counts.
    num_posts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    posts: Mapped[list[Post]] = relationship(
        secondary="post_tags",
        viewonly=True,
    )
    post_links: Mapped[list[PostTag]] = relationship(
        back_populates="tag",
        cascade="all, delete-orphan",
    )


class PostTag(Base):
    """Join row linking a post to a tag."""

    __tablename__ = "post_tags"
    __table_args__ = (
        UniqueConstraint("post_id", "tag_id", name="uq_post_tags_post_id_tag_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    post: Mapped[Post] = relationship(back_populates="tag_links")
    tag: Mapped[Tag] = relationship(back_populates="post_links")
