"""Application configuration management."""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./jobdesk.db"

    # Redis (one-time codes)
    redis_url: str = "redis://localhost:6379/0"

    # Session tokens
    jwt_secret: str = Field(
        default="change-me-in-production",
        description="Server-held secret used to sign session tokens",
    )
    jwt_algorithm: str = "HS256"
    access_token_ttl_seconds: int = Field(default=3600, ge=1)
    refresh_token_ttl_seconds: int = Field(default=7 * 24 * 3600, ge=1)

    # Security
    cookie_secure: bool = Field(
        default=True,
        description="Set to False for local HTTP development",
    )
    cors_origins: list[str] = ["http://localhost:5173"]

    # Resume uploads
    upload_dir: str = "./uploads"
    max_resume_size_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    allowed_resume_extensions: list[str] = [".pdf", ".doc", ".docx"]
    submission_timeout_seconds: float = Field(default=30.0, gt=0)

    # Registration one-time codes
    otp_ttl_seconds: int = Field(default=600, ge=30)
    otp_length: int = Field(default=6, ge=4, le=10)
    otp_max_attempts: int = Field(default=5, ge=1)

    # Bootstrap moderator account
    admin_email: str | None = None
    admin_password: str | None = None

    log_level: str = "INFO"

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()
