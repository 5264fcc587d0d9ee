"""Application settings and configuration.

This module defines all configuration options for the blog engine.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Site metadata
    site_title: str = Field(default="cow-blog", alias="SITE_TITLE")
    site_url: str = Field(default="http://localhost:8000", alias="SITE_URL")
    site_description: str = Field(
        default="Just another blog engine, with cows",
        alias="SITE_DESCRIPTION",
    )
    app_version: str = Field(default="0.2.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./cow_blog.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Listing and pagination
    posts_per_page: int = Field(default=10, ge=1, alias="POSTS_PER_PAGE")

    # Characters kept verbatim when deriving a tag or category url from its title.
    tag_category_title_regex: str = Field(
        default=r"[A-Za-z0-9_\s-]",
        alias="TAG_CATEGORY_TITLE_REGEX",
    )
    # When false, "Clojure" and "clojure" resolve to the same tag.
    tag_titles_case_sensitive: bool = Field(default=True, alias="TAG_TITLES_CASE_SENSITIVE")

    # Admin authentication
    admin_realm: str = Field(default="cow-blog admin", alias="ADMIN_REALM")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Bare ``postgres://`` and ``postgresql://`` URLs are pointed at the
        psycopg 3 driver installed by the ``postgres`` extra.
        """
        url = self.database_url
        if self.use_testing_database and self.test_database_url:
            url = self.test_database_url
        for prefix in ("postgres://", "postgresql://"):
            if url.startswith(prefix):
                return "postgresql+psycopg://" + url[len(prefix):]
        return url


settings = Settings()
