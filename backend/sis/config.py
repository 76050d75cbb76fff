"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets and deployment endpoints come from environment variables
    - get_settings() is cached (lru_cache) - single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all settings: works out-of-the-box with docker-compose
    - Report mail delivery is opt-in (email_report_notification_enabled=False)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

APP_VERSION = "1.0.0"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://sis:sis@db:5432/sis"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # API
    cors_origins: list[str] = ["http://localhost:5173"]
    school_name: str = "Heronix High School"

    # Report cache
    report_cache_enabled: bool = True
    report_cache_ttl_seconds: int = 900
    report_cache_max_entries: int = 128

    # Report e-mail notification
    email_report_notification_enabled: bool = False
    smtp_host: str = "localhost"
    smtp_port: int = 25
    smtp_sender: str = "reports@sis.local"
    smtp_timeout_seconds: int = 10
    report_recipients: list[str] = []

    # Batch export
    batch_export_enabled: bool = True
    batch_export_max_size: int = 50

    # Attendance
    default_chronic_threshold: float = 10.0

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
