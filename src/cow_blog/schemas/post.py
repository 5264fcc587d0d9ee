"""Post-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .comment import AdminCommentResponse, CommentResponse
from .common import UtcDatetime
from .taxonomy import TermResponse

PostStatus = Literal["public", "draft"]


class AuthorResponse(BaseModel):
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class ParentResponse(BaseModel):
    """The subset of a parent post loaded alongside its children."""

    id: int
    title: str
    status: str
    type: str

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    """Post with its category, tags, author and parent."""

    id: int
    title: str
    url: str
    html: str | None
    status: str
    type: str
    date_created: UtcDatetime
    num_comments: int
    category: TermResponse | None = None
    tags: list[TermResponse] = []
    user: AuthorResponse | None = None
    parent: ParentResponse | None = None

    model_config = ConfigDict(from_attributes=True)


class PostDetailResponse(PostResponse):
    """Single post page with its visible comments."""

    comments: list[CommentResponse] = []


class AdminPostDetailResponse(PostResponse):
    """Post as edited by the admin, markdown source included."""

    markdown: str
    comments: list[AdminCommentResponse] = []


class PostPage(BaseModel):
    """One page of posts plus what is needed to render page navigation."""

    items: list[PostResponse]
    page: int
    per_page: int
    total: int


class TermPage(PostPage):
    """A tag or category page."""

    term: TermResponse


class PostCreate(BaseModel):
    """Schema for creating a post. ``tags`` is a comma-separated list of titles."""

    title: str = Field(..., min_length=1, max_length=500)
    markdown: str
    url: str | None = Field(None, max_length=500)
    status: PostStatus = "draft"
    type: str = "blog"
    category_id: int | None = None
    parent_id: int | None = None
    tags: str | None = None


class PostUpdate(BaseModel):
    """Admin edit of a post; only the fields sent are changed."""

    title: str | None = Field(None, min_length=1, max_length=500)
    markdown: str | None = None
    url: str | None = Field(None, max_length=500)
    status: PostStatus | None = None
    type: str | None = None
    category_id: int | None = None
    parent_id: int | None = None
    tags: str | None = None
    remove_tag_ids: list[int] = []


class PostTagsUpdate(BaseModel):
    """The complete, comma-separated tag list a post should carry."""

    tags: str = ""
