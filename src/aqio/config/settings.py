from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Literal
from functools import lru_cache
from ..validators.config_validators import to_uppercase, to_lowercase, to_async_sqlite_url


class Settings(BaseSettings):
    """
    Application settings loaded from the environment (and an optional `.env` file).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # Database configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./aqio.db"
    SQLITE_FOREIGN_KEYS: bool = True
    SEED_DEFAULT_CATEGORIES: bool = True

    # Test database configuration
    TEST_DATABASE_URL: str | None = None
    TESTING: bool = False

    # SQLAlchemy
    SQLALCHEMY_ECHO: bool = False

    # Repositories
    DEFAULT_PAGE_SIZE: int = 50

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("./logs")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False
    LOG_USE_QUEUE: bool = False
    LOG_QUEUE_MAX_SIZE: int = 0  # 0 = unbounded
    LOG_QUEUE_BLOCKING: bool = False
    LOG_QUEUE_DROP_WARNING_THRESHOLD: int = 100

    # --- Derived settings ---
    @property
    def EFFECTIVE_DATABASE_URL(self) -> str:
        """
        The URL the engine should connect to.

        When `TESTING=True` and `TEST_DATABASE_URL` is set, the test database wins so a
        test run never writes into the development file.
        """
        if self.TESTING and self.TEST_DATABASE_URL:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """Logging expects upper-case level names ("DEBUG", "INFO", ...)."""
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("DATABASE_URL", "TEST_DATABASE_URL", mode="before")
    def normalize_database_url(cls, v: str | None) -> str | None:
        return to_async_sqlite_url(v)

    @field_validator("DEFAULT_PAGE_SIZE")
    def check_page_size(cls, v: int) -> int:
        if not 1 <= v <= 1000:
            raise ValueError("DEFAULT_PAGE_SIZE must be between 1 and 1000")
        return v

    model_config = SettingsConfigDict(
        # .env at the project root (three levels up from this file in the src layout)
        env_file=str(Path(__file__).resolve().parents[3] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# get_settings() always returns the same settings from the environment,
# so it is cached with @lru_cache().
@lru_cache()
def get_settings() -> Settings:
    return Settings()
