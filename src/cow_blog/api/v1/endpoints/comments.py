"""Public comment submission."""

from fastapi import APIRouter, status

from cow_blog.schemas.comment import CommentCreate, CommentResponse
from cow_blog.services import comment_service

from ..dependencies import ClientIpDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    comment_in: CommentCreate,
    db: SessionDep,
    ip: ClientIpDep,
) -> CommentResponse:
    """Add a comment to a public post.

    Raises:
        NotFound: If the post does not exist or is not public (mapped to 404).
    """
    comment = comment_service.add_comment(
        db,
        comment_in.post_id,
        markdown=comment_in.markdown,
        author=comment_in.author,
        email=comment_in.email,
        homepage=comment_in.homepage,
        ip=ip,
    )
    db.commit()
    db.refresh(comment)
    return CommentResponse.model_validate(comment)
