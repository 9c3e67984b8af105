"""Application settings and configuration.

This module defines all configuration options for the Threadline service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Threadline", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./threadline.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    auto_create_tables: bool = Field(default=False, alias="AUTO_CREATE_TABLES")

    # Trending window: reactions older than this never count toward trending.
    trending_window_hours: int = Field(default=24, ge=1, alias="TRENDING_WINDOW_HOURS")
    trending_default_hours_back: int = Field(
        default=6,
        ge=1,
        alias="TRENDING_DEFAULT_HOURS_BACK",
    )
    trending_default_limit: int = Field(default=20, ge=1, alias="TRENDING_DEFAULT_LIMIT")

    # Reaction listings
    reactions_page_size: int = Field(default=20, ge=1, alias="REACTIONS_PAGE_SIZE")
    reactions_max_page_size: int = Field(default=100, ge=1, alias="REACTIONS_MAX_PAGE_SIZE")

    # Post authoring limits
    post_max_length: int = Field(default=280, ge=1, alias="POST_MAX_LENGTH")
    thread_title_length: int = Field(default=100, ge=1, alias="THREAD_TITLE_LENGTH")

    # Thread listings
    active_threads_hours_back: int = Field(default=24, ge=1, alias="ACTIVE_THREADS_HOURS_BACK")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
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

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
