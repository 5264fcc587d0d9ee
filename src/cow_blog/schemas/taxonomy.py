"""Tag and category schemas."""

from pydantic import BaseModel, ConfigDict, Field


class TermResponse(BaseModel):
    """A tag or a category."""

    id: int
    title: str
    url: str
    num_posts: int

    model_config = ConfigDict(from_attributes=True)


class TermCreate(BaseModel):
    """Schema for creating a tag or category. The url is derived when omitted."""

    title: str = Field(..., min_length=1, max_length=200)
    url: str | None = Field(None, max_length=200)


class TermUpdate(TermCreate):
    """Schema for renaming a tag or category."""


class MergeRequest(BaseModel):
    """Move everything from one term onto another and delete the first."""

    from_id: int
    to_id: int
