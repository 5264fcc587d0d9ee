"""SQLAlchemy model for reader comments."""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cow_blog.db.session import Base
from cow_blog.db.time import utcnow

from .post import STATUS_PUBLIC

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .post import Post

GRAVATAR_BASE_URL = "https://www.gravatar.com/avatar/"
DEFAULT_AUTHOR = "Anonymous Cow"


class Comment(Base):
    """Comment attached to a post, submitted publicly and moderated by the admin."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author: Mapped[str] = mapped_column(Text, nullable=False, default=DEFAULT_AUTHOR)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    homepage: Mapped[str | None] = mapped_column(Text, nullable=True)
    markdown: Mapped[str] = mapped_column(Text, nullable=False)
    html: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default=STATUS_PUBLIC)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post: Mapped[Post] = relationship(back_populates="comments")

    @property
    def avatar_url(self) -> str:
        """Return the gravatar URI for the commenter.

        Keyed on the email address, or on the ip when no email was given.
        """
        identity = (self.email or self.ip or "").strip().lower()
        digest = hashlib.md5(identity.encode("utf-8")).hexdigest()
        return f"{GRAVATAR_BASE_URL}{digest}"
