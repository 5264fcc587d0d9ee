"""Shared dependencies for the version 1 endpoints."""

from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from cow_blog.core.settings import settings
from cow_blog.db.session import get_db
from cow_blog.models import User
from cow_blog.services.user_service import check_user

basic_scheme = HTTPBasic(realm=settings.admin_realm)

SessionDep = Annotated[Session, Depends(get_db)]


def get_admin_user(
    credentials: Annotated[HTTPBasicCredentials, Depends(basic_scheme)],
    db: SessionDep,
) -> User:
    """Return the user matching the HTTP Basic credentials.

    Raises:
        HTTPException: If the username or password is wrong.
    """
    user = check_user(db, credentials.username, credentials.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": f'Basic realm="{settings.admin_realm}"'},
        )
    return user


def get_page_number(
    p: int = Query(1, ge=1, description="1-based page number"),
) -> int:
    """Return the requested page number."""
    return p


def client_ip(request: Request) -> str | None:
    """Return the caller's address, preferring the proxy-supplied one."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


AdminDep = Annotated[User, Depends(get_admin_user)]
PageDep = Annotated[int, Depends(get_page_number)]
ClientIpDep = Annotated[str | None, Depends(client_ip)]
