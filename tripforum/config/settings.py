"""Forum client settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPFORUM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="tripforum", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )

    # Remote API
    api_base_url: str = Field(
        default="http://localhost:8080", description="Forum API base URL"
    )
    request_timeout: float = Field(
        default=15.0, description="Per-request timeout (seconds)"
    )

    # Comment tree
    comments_initial_visible: int = Field(
        default=3, ge=1, description="Top-level comments shown before 'show more'"
    )
    comment_image_placeholder: str = Field(
        default="NO_IMAGE",
        description="Image path sent with text-only comments (server requires one)",
    )

    # Reports
    report_description_max_length: int = Field(
        default=500, ge=1, description="Max report description length"
    )
    report_success_dismiss_seconds: float = Field(
        default=3.0, description="Auto-dismiss delay for the report acknowledgement"
    )
    duplicate_report_error_code: int = Field(
        default=1022, description="Server error code meaning 'already reported'"
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=False, description="Include caller info"
    )
    log_dir: str | None = Field(
        default=None, description="Directory for log files (None disables file output)"
    )
    log_file_max_bytes: int = Field(
        default=5 * 1024 * 1024, description="Max size per log file (5MB default)"
    )
    log_file_backup_count: int = Field(
        default=3, description="Number of backup log files to keep"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def api_root(self) -> str:
        """Base URL without a trailing slash."""
        return self.api_base_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
