"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (reported by /health)
    VERSION: str = "1.0.0"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Migration run paging
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 1000

    # Migration labels are timestamps like 2024-03-24T12:00:00
    LABEL_MAX_LENGTH: int = 20

    # Retention sweep (short-lived mapping kinds)
    RETENTION_SWEEP_INTERVAL_SECONDS: int = 3600
    VISIT_BALANCE_ADJUSTMENT_EXPIRY_DAYS: int = 28

    # Internal scheduled endpoints (cron jobs)
    INTERNAL_SECRET: str = ""  # Secret for /internal/scheduled/* endpoints

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Worker / CLI logging
    LOG_LEVEL: str = "INFO"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


settings = Settings()
