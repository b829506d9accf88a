"""Application settings and configuration.

This module defines all configuration options for the PulseVote service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="PulseVote", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./pulsevote.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Hosted language model gateway (OpenAI-compatible chat completions)
    ai_gateway_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1/chat/completions",
        alias="AI_GATEWAY_URL",
    )
    ai_gateway_api_key: str | None = Field(default=None, alias="AI_GATEWAY_API_KEY")
    ai_text_model: str = Field(default="google/gemini-2.5-flash", alias="AI_TEXT_MODEL")
    ai_image_model: str = Field(
        default="google/gemini-2.5-flash-image-preview",
        alias="AI_IMAGE_MODEL",
    )
    ai_http_timeout_seconds: float = Field(default=60.0, alias="AI_HTTP_TIMEOUT_SECONDS")

    # Survey authoring limits
    survey_min_options: int = Field(default=2, alias="SURVEY_MIN_OPTIONS")
    survey_max_options: int = Field(default=6, alias="SURVEY_MAX_OPTIONS")

    # Base URL used when building public share links
    public_base_url: str = Field(default="http://localhost:8080", alias="PUBLIC_BASE_URL")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def ai_enabled(self) -> bool:
        """Return True when the generation gateway has credentials configured."""
        return bool(self.ai_gateway_api_key)


settings = Settings()  # type: ignore[call-arg]
