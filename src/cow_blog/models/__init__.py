"""SQLAlchemy models for the blog engine."""

from .category import Category
from .comment import Comment
from .post import Post
from .tag import PostTag, Tag
from .user import User

__all__ = [
    "Category",
    "Comment",
    "Post",
    "PostTag", "Tag",
    "User",
]
