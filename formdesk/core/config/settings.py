from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Database settings
    DATABASE_URL: str = "sqlite:///./formdesk.db"

    # JWT settings
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7

    # Seeded on startup when both are set
    DEFAULT_ADMIN_EMAIL: Optional[str] = None
    DEFAULT_ADMIN_PASSWORD: Optional[str] = None
    DEFAULT_ADMIN_BUSINESS_NAME: str = "Formdesk Admin"

    # API settings
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Formdesk API"
    DEBUG: bool = False
    CORS_ORIGINS: list = ["*"]

    # Pagination
    FORMS_PAGE_SIZE: int = 10
    RESPONSES_PAGE_SIZE: int = 20

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_FILE_MAX_BYTES: int = 10 * 1024 * 1024
    LOG_FILE_BACKUPS: int = 5

    # Rate limiting, only active when REDIS_URL is configured
    REDIS_URL: Optional[str] = None
    RATE_LIMIT_PER_MINUTE: int = 100

@lru_cache()
def get_settings() -> Settings:
    """
    Get settings instance with caching
    Returns:
        Settings instance
    """
    return Settings()
