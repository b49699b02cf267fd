from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
from pathlib import Path
from typing import Annotated, Literal
from functools import lru_cache
from ..constants import SAMPLE_DATA_MAX_COUNT as DEFAULT_SAMPLE_DATA_MAX_COUNT
from ..validators.normalizers import to_uppercase, to_lowercase, split_csv


class Settings(BaseSettings):
    """
    Application settings loaded from the environment (and an optional `.env`).
    """

    # Environment
    ENV: Literal["development", "testing", "staging", "production"] = "development"

    # API
    APP_NAME: str = "Product Catalog API"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    API_V1_PREFIX: str = "/api/v1"
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]
    # Grants access to inactive listings (`is_active=false`) when sent as X-Admin-Token.
    ADMIN_TOKEN: str | None = None

    # Database configuration
    DATABASE_URL_OVERRIDE: str | None = None
    POSTGRES_DRIVER: str = "psycopg"
    POSTGRES_USERNAME: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "product_catalog"

    # Test database configuration
    TEST_POSTGRES_DB: str | None = None
    TESTING: bool = False

    # SQLAlchemy / pool
    SQLALCHEMY_ECHO: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: float = 30.0
    DB_CONNECT_TIMEOUT: int = 10
    DB_STATEMENT_TIMEOUT_MS: int = 30_000
    DB_CREATE_SCHEMA: bool = True

    # Catalog behaviour
    BULK_INSERT_CHUNK_SIZE: int = 50
    SAMPLE_DATA_DEFAULT_COUNT: int = 50
    SAMPLE_DATA_MAX_COUNT: int = DEFAULT_SAMPLE_DATA_MAX_COUNT

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: Literal["json", "text"] = "json"
    LOG_TO_STDOUT: bool = True
    LOG_DIR: Path = Path("/var/log/catalog")
    LOG_MAX_BYTES: int = 10_000_000  # 10 MB
    LOG_BACKUP_COUNT: int = 5
    ENABLE_SQL_LOGGING: bool = False

    # --- Derived settings ---
    @property
    def DATABASE_URL(self) -> str:
        """
        Return the database URL for the current environment.

        `DATABASE_URL_OVERRIDE` wins when set (any SQLAlchemy async URL, e.g. SQLite for
        local runs). Otherwise the URL is assembled from the POSTGRES_* parts, switching to
        `TEST_POSTGRES_DB` when `TESTING=True` so tests never touch the main database.
        """
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE

        database = self.POSTGRES_DB
        if self.TESTING and self.TEST_POSTGRES_DB:
            database = self.TEST_POSTGRES_DB

        return (
            f"postgresql+{self.POSTGRES_DRIVER}://"
            f"{self.POSTGRES_USERNAME}:{self.POSTGRES_PASSWORD}@"
            f"{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{database}"
        )

    # --- Validators ---
    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: str | None) -> str | None:
        """
        Normalize LOG_LEVEL to upper case before the Literal check runs, so
        `LOG_LEVEL=debug` is accepted.
        """
        return to_uppercase(v)

    @field_validator("LOG_FORMAT", mode="before")
    def normalize_log_format(cls, v: str | None) -> str | None:
        return to_lowercase(v)

    @field_validator("CORS_ORIGINS", mode="before")
    def parse_cors_origins(cls, v):
        return split_csv(v)

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parent.parent / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
