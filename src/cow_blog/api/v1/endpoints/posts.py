"""Public post endpoints."""

from fastapi import APIRouter, Query

from cow_blog.core.settings import settings
from cow_blog.schemas.post import PostDetailResponse, PostPage, PostResponse
from cow_blog.services import post_service

from ..dependencies import PageDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=PostPage)
async def list_posts(
    db: SessionDep,
    page: PageDep,
    post_type: str = Query("blog", alias="type", description="Post type to list"),
) -> PostPage:
    """List public posts of one type, newest first."""
    posts = post_service.list_posts(db, page=page, post_type=post_type)
    total = post_service.count_posts(db, post_type=post_type)
    return PostPage(
        items=[PostResponse.model_validate(post) for post in posts],
        page=page,
        per_page=settings.posts_per_page,
        total=total,
    )


@router.get("/{key}", response_model=PostDetailResponse)
async def get_post(key: str, db: SessionDep) -> PostDetailResponse:
    """Get a public post by id or url, with its public comments."""
    post = post_service.get_post(db, key)
    return PostDetailResponse.model_validate(post)
