"""Storage configuration management"""

from functools import lru_cache
from pathlib import Path
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings

# Base directory: repository root
_BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Storage settings with environment variable support"""

    # Application
    APP_NAME: str = "OAuth Store"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database
    DATABASE_URL: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "oauth_db"
    POSTGRES_USER: str = "oauth"
    POSTGRES_PASSWORD: str = "oauth"
    DATABASE_NAME: str = ""  # schema holding clients/authorizations/accesses
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600

    # Database initialization discipline
    DB_INIT_MODE: str = "migrate"  # migrate | create_all | off
    DB_REQUIRE_HEAD: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True

    def get_log_file(self) -> str:
        """Resolve log file path against the repository root, empty means stream-only logging"""
        if not self.LOG_FILE:
            return ""
        return str((_BASE_DIR / self.LOG_FILE).resolve())

    def get_database_url(self) -> str:
        """
        Resolve database URL.

        Priority:
          1) Explicit DATABASE_URL
          2) Construct from POSTGRES_* parts with safe URL encoding
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        user = quote_plus(self.POSTGRES_USER)
        password = quote_plus(self.POSTGRES_PASSWORD)
        return (
            f"postgresql://{user}:{password}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    def get_database_name(self):
        """Schema name for the storage tables, or None for the default schema"""
        return self.DATABASE_NAME.strip() or None

    def validate_database_settings(self) -> None:
        """
        Validate database initialization settings in production.

        Raises:
            ValueError: If a development-only init mode is configured.
        """
        mode = self.DB_INIT_MODE.lower().strip()
        if mode not in {"migrate", "create_all", "off"}:
            raise ValueError(f"Unknown DB_INIT_MODE: {self.DB_INIT_MODE}")

        if self.ENVIRONMENT.lower() != "production":
            return

        if mode == "create_all":
            raise ValueError(
                "DB_INIT_MODE=create_all is not allowed in production. Run Alembic migrations instead."
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
