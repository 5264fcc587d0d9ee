"""Main entry point for the blog engine."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from cow_blog.api.v1 import admin_router, comments_router, posts_router, taxonomy_router
from cow_blog.core.errors import BlogError, ConstraintViolation, NotFound, ValidationFailure
from cow_blog.core.settings import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.site_title,
    description=settings.site_description,
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(posts_router, prefix="/api/v1")
app.include_router(taxonomy_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")

ERROR_STATUS: dict[type[BlogError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    ConstraintViolation: status.HTTP_409_CONFLICT,
    ValidationFailure: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError) -> JSONResponse:
    """Map data-layer failures onto HTTP status codes."""
    status_code = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(exc, kind)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("Unhandled data-layer error on %s: %s", request.url.path, exc)
    else:
        logger.info("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    content: dict[str, str] = {"detail": str(exc)}
    field = getattr(exc, "field", None)
    if field:
        content["field"] = field
    return JSONResponse(status_code=status_code, content=content)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the blog."""
    return {
        "name": settings.site_title,
        "version": settings.app_version,
        "description": settings.site_description,
        "url": settings.site_url,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
