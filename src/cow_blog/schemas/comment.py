"""Comment-related Pydantic schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .common import UtcDatetime


class CommentCreate(BaseModel):
    """Schema for a publicly submitted comment."""

    post_id: int
    markdown: str = Field(..., min_length=1, max_length=10000)
    author: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=200)
    homepage: str | None = Field(None, max_length=500)


class CommentUpdate(BaseModel):
    """Admin edit of a comment; only the fields sent are changed."""

    post_id: int | None = None
    status: str | None = None
    author: str | None = None
    email: str | None = None
    homepage: str | None = None
    markdown: str | None = None


class CommentResponse(BaseModel):
    """Comment as shown to readers."""

    id: int
    post_id: int
    author: str
    homepage: str | None
    html: str | None
    date_created: UtcDatetime
    avatar_url: str

    model_config = ConfigDict(from_attributes=True)


class AdminCommentResponse(CommentResponse):
    """Comment with the fields only the admin may see."""

    email: str | None
    ip: str | None
    status: str
    markdown: str


class CommentPage(BaseModel):
    """One page of the admin comment listing."""

    items: list[AdminCommentResponse]
    page: int
    per_page: int
    total: int
