"""Public tag and category endpoints."""

from fastapi import APIRouter

from cow_blog.core.settings import settings
from cow_blog.db.query import CATEGORIES, TAGS, fetch_all
from cow_blog.schemas.post import PostResponse, TermPage
from cow_blog.schemas.taxonomy import TermResponse
from cow_blog.services import post_service

from ..dependencies import PageDep, SessionDep

router = APIRouter(tags=["taxonomy"])


@router.get("/categories", response_model=list[TermResponse])
async def list_categories(db: SessionDep) -> list[TermResponse]:
    """List every category by title."""
    return [TermResponse.model_validate(c) for c in fetch_all(db, CATEGORIES)]


@router.get("/categories/{key}", response_model=TermPage)
async def category_page(key: str, db: SessionDep, page: PageDep) -> TermPage:
    """One page of the public blog posts in a category."""
    category, posts, total = post_service.category_page(db, key, page=page)
    return TermPage(
        term=TermResponse.model_validate(category),
        items=[PostResponse.model_validate(post) for post in posts],
        page=page,
        per_page=settings.posts_per_page,
        total=total,
    )


@router.get("/tags", response_model=list[TermResponse])
async def list_tags(db: SessionDep) -> list[TermResponse]:
    """List every tag by title."""
    return [TermResponse.model_validate(t) for t in fetch_all(db, TAGS)]


@router.get("/tags/{key}", response_model=TermPage)
async def tag_page(key: str, db: SessionDep, page: PageDep) -> TermPage:
    """One page of the public blog posts carrying a tag."""
    tag, posts, total = post_service.tag_page(db, key, page=page)
    return TermPage(
        term=TermResponse.model_validate(tag),
        items=[PostResponse.model_validate(post) for post in posts],
        page=page,
        per_page=settings.posts_per_page,
        total=total,
    )
