from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings and configuration"""

    # Application
    APP_NAME: str = "PharmacyPOS"
    APP_VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./pharmacy_pos.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_TIMEOUT_SECONDS: float = 30.0  # SQLite busy timeout

    # Location
    PHARMACY_ID: str = "pharmacy_main"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Cloud sync
    CLOUD_API_URL: str = "http://localhost:3001/api"
    CLOUD_API_KEY: Optional[str] = None
    SYNC_INTERVAL_MINUTES: int = 15
    SYNC_AUTO_START: bool = False
    SYNC_PUSH_TIMEOUT_SECONDS: float = 30.0

    # Connectivity probe
    CONNECTIVITY_CHECK_URL: str = "https://www.google.com"
    CONNECTIVITY_TIMEOUT_SECONDS: float = 5.0

    # Inventory
    LOW_STOCK_THRESHOLD: int = 10

    # Pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "pharmacy_pos.log"

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
