"""Routers for the version 1 API."""

from .admin import router as admin_router
from .comments import router as comments_router
from .posts import router as posts_router
from .taxonomy import router as taxonomy_router

__all__ = [
    "admin_router",
    "comments_router",
    "posts_router",
    "taxonomy_router",
]
