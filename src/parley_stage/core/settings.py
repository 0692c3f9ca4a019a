"""Application settings and configuration.

This module defines all configuration options for the Parley Stage application.
Settings are loaded from environment variables with sensible defaults and are
read once at process start; changing them requires a restart.
"""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Parley Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./parley.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    db_isolation_level: str = Field(default="SERIALIZABLE", alias="DB_ISOLATION_LEVEL")
    db_pool_timeout_seconds: float = Field(default=5.0, alias="DB_POOL_TIMEOUT_SECONDS")
    db_statement_timeout_seconds: float = Field(default=5.0, alias="DB_STATEMENT_TIMEOUT_SECONDS")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Reputation gate (IP reputation + CAPTCHA)
    recaptcha_secret: str = Field(default="", alias="RECAPTCHA_SECRET")
    recaptcha_verify_url: str = Field(
        default="https://www.google.com/recaptcha/api/siteverify",
        alias="RECAPTCHA_VERIFY_URL",
    )
    ipintel_url: str = Field(
        default="http://check.getipintel.net/check.php",
        alias="IPINTEL_URL",
    )
    ipintel_contact: str = Field(default="admin@example.com", alias="IPINTEL_CONTACT")
    reputation_deny_threshold: float = Field(default=0.90, alias="REPUTATION_DENY_THRESHOLD")
    remote_timeout_seconds: float = Field(default=5.0, alias="REMOTE_TIMEOUT_SECONDS")

    # Trust state machine
    captcha_reroll_probability: float = Field(default=0.10, alias="CAPTCHA_REROLL_PROBABILITY")
    post_cooldown_seconds: int = Field(default=15, alias="POST_COOLDOWN_SECONDS")

    # Content filtering
    blacklist: Annotated[list[str], NoDecode] = Field(default_factory=list, alias="BLACKLIST")
    anonymous_marker: str = Field(default="££", alias="ANONYMOUS_MARKER")
    anonymous_identity: str = Field(default="1.1.1.1", alias="ANONYMOUS_IDENTITY")

    # Identity resolution
    identity_header: str | None = Field(default=None, alias="IDENTITY_HEADER")
    loopback_identity: str = Field(default="1.2.3.4", alias="LOOPBACK_IDENTITY")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("blacklist", mode="before")
    @classmethod
    def _split_blacklist(cls, value: object) -> object:
        """Accept the word list as a whitespace-separated string."""
        if isinstance(value, str):
            return [word.lower() for word in value.split()]
        if isinstance(value, list):
            return [str(word).lower() for word in value]
        return value

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()
