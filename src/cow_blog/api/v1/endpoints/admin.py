"""Admin endpoints for managing posts, comments, tags and categories.

Every route requires HTTP Basic credentials of a blog user.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from cow_blog.core.settings import settings
from cow_blog.db.schema import EntityType
from cow_blog.schemas.comment import AdminCommentResponse, CommentPage, CommentUpdate
from cow_blog.schemas.common import CountUpdatesResponse
from cow_blog.schemas.post import (
    AdminPostDetailResponse,
    PostCreate,
    PostPage,
    PostResponse,
    PostTagsUpdate,
    PostUpdate,
)
from cow_blog.schemas.taxonomy import MergeRequest, TermCreate, TermResponse, TermUpdate
from cow_blog.services import comment_service, post_service, taxonomy
from cow_blog.services.counts import update_counts

from ..dependencies import AdminDep, PageDep, SessionDep, get_admin_user

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_admin_user)],
)

TERM_TYPES = {"tags": EntityType.TAG, "categories": EntityType.CATEGORY}


@router.get("/posts", response_model=PostPage)
async def list_posts(db: SessionDep, page: PageDep) -> PostPage:
    """List posts of every type and status, newest first."""
    posts = post_service.list_posts(db, admin=True, page=page, post_type=None)
    total = post_service.count_posts(db, admin=True, post_type=None)
    return PostPage(
        items=[PostResponse.model_validate(post) for post in posts],
        page=page,
        per_page=settings.posts_per_page,
        total=total,
    )


@router.get("/posts/{post_id}", response_model=AdminPostDetailResponse)
async def get_post(post_id: int, db: SessionDep) -> AdminPostDetailResponse:
    """Get any post with its markdown source and every comment."""
    post = post_service.get_post(db, post_id, admin=True)
    return AdminPostDetailResponse.model_validate(post)


@router.post("/posts", response_model=AdminPostDetailResponse, status_code=status.HTTP_201_CREATED)
async def add_post(
    post_in: PostCreate,
    db: SessionDep,
    user: AdminDep,
) -> AdminPostDetailResponse:
    """Create a post, deriving its url from the title when none is given."""
    post = post_service.create_post(
        db,
        user,
        title=post_in.title,
        markdown=post_in.markdown,
        url=post_in.url,
        status=post_in.status,
        post_type=post_in.type,
        category_id=post_in.category_id,
        parent_id=post_in.parent_id,
        tags=post_in.tags,
    )
    db.commit()
    return AdminPostDetailResponse.model_validate(post_service.get_post(db, post.id, admin=True))


@router.put("/posts/{post_id}", response_model=AdminPostDetailResponse)
async def edit_post(post_id: int, post_in: PostUpdate, db: SessionDep) -> AdminPostDetailResponse:
    """Change the fields sent, add ``tags`` and remove ``remove_tag_ids``."""
    fields = post_in.model_dump(exclude_unset=True, exclude={"tags", "remove_tag_ids"})
    post_service.edit_post(
        db,
        post_id,
        tags=post_in.tags,
        remove_tag_ids=post_in.remove_tag_ids,
        **fields,
    )
    db.commit()
    return AdminPostDetailResponse.model_validate(post_service.get_post(db, post_id, admin=True))


@router.put("/posts/{post_id}/tags", response_model=AdminPostDetailResponse)
async def replace_post_tags(
    post_id: int,
    tags_in: PostTagsUpdate,
    db: SessionDep,
) -> AdminPostDetailResponse:
    """Replace the whole tag set of a post with the titles in ``tags``."""
    post_service.replace_post_tags(db, post_id, tags_in.tags)
    db.commit()
    return AdminPostDetailResponse.model_validate(post_service.get_post(db, post_id, admin=True))


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(post_id: int, db: SessionDep) -> Response:
    post_service.delete_post(db, post_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/comments", response_model=CommentPage)
async def list_comments(db: SessionDep, page: PageDep) -> CommentPage:
    """List comments of every status, newest first."""
    comments = comment_service.list_comments(db, admin=True, page=page)
    return CommentPage(
        items=[AdminCommentResponse.model_validate(c) for c in comments],
        page=page,
        per_page=settings.posts_per_page,
        total=comment_service.count_comments(db, admin=True),
    )


@router.get("/comments/{comment_id}", response_model=AdminCommentResponse)
async def get_comment(comment_id: int, db: SessionDep) -> AdminCommentResponse:
    comment = comment_service.get_comment(db, comment_id, admin=True)
    return AdminCommentResponse.model_validate(comment)


@router.put("/comments/{comment_id}", response_model=AdminCommentResponse)
async def edit_comment(
    comment_id: int,
    comment_in: CommentUpdate,
    db: SessionDep,
) -> AdminCommentResponse:
    comment = comment_service.edit_comment(
        db, comment_id, **comment_in.model_dump(exclude_unset=True)
    )
    db.commit()
    db.refresh(comment)
    return AdminCommentResponse.model_validate(comment)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(comment_id: int, db: SessionDep) -> Response:
    comment_service.delete_comment(db, comment_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{kind}", response_model=TermResponse, status_code=status.HTTP_201_CREATED)
async def add_term(kind: str, term_in: TermCreate, db: SessionDep) -> TermResponse:
    """Create a tag (``/admin/tags``) or a category (``/admin/categories``)."""
    term = taxonomy.create_term(db, _term_type(kind), term_in.title, term_in.url)
    db.commit()
    return TermResponse.model_validate(term)


@router.post("/{kind}/merge", response_model=TermResponse)
async def merge_terms(kind: str, merge_in: MergeRequest, db: SessionDep) -> TermResponse:
    """Fold one tag or category into another."""
    if _term_type(kind) is EntityType.TAG:
        term = taxonomy.merge_tags(db, merge_in.from_id, merge_in.to_id)
    else:
        term = taxonomy.merge_categories(db, merge_in.from_id, merge_in.to_id)
    db.commit()
    db.refresh(term)
    return TermResponse.model_validate(term)


@router.put("/{kind}/{term_id}", response_model=TermResponse)
async def edit_term(kind: str, term_id: int, term_in: TermUpdate, db: SessionDep) -> TermResponse:
    term = taxonomy.edit_term(db, _term_type(kind), term_id, term_in.title, term_in.url)
    db.commit()
    db.refresh(term)
    return TermResponse.model_validate(term)


@router.delete("/{kind}/{term_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_term(kind: str, term_id: int, db: SessionDep) -> Response:
    taxonomy.delete_term(db, _term_type(kind), term_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/maintenance/update-counts", response_model=CountUpdatesResponse)
async def run_update_counts(db: SessionDep) -> CountUpdatesResponse:
    """Recompute cached comment and post counts."""
    updates = update_counts(db)
    db.commit()
    return CountUpdatesResponse.model_validate(updates)


def _term_type(kind: str) -> EntityType:
    try:
        return TERM_TYPES[kind]
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found") from None
