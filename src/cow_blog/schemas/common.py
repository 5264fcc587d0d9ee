"""Schemas shared across endpoints."""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict

from cow_blog.db.time import as_utc

# Stored timestamps come back naive from SQLite; responses always carry UTC.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CountUpdatesResponse(BaseModel):
    """Rows rewritten by a count maintenance run."""

    posts: int
    categories: int
    tags: int
    total: int

    model_config = ConfigDict(from_attributes=True)
