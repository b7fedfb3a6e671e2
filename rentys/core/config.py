"""
Rentys Application Configuration
Loads settings from .env file using Pydantic v2 with BaseSettings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ==================== Project Info ====================
    PROJECT_NAME: str = "Rentys API"
    PROJECT_DESCRIPTION: str = "Room rental marketplace connecting tenants and owners"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==================== Database ====================
    DATABASE_URL: str = "sqlite:///rentys_local.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10
    DATABASE_POOL_RECYCLE: int = 3600
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_CONNECT_TIMEOUT: int = 10
    DATABASE_STATEMENT_TIMEOUT_MS: int = 30000

    # ==================== Backend Retry ====================
    # Reads only; writes are single attempt
    BACKEND_MAX_RETRIES: int = 2
    BACKEND_RETRY_BACKOFF_SECONDS: float = 0.2

    # ==================== Security & Authentication ====================
    SECRET_KEY: str = "change-this-secret-key-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # ==================== Supabase Configuration ====================
    SUPABASE_ENABLED: bool = False
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""

    # ==================== CORS & Frontend ====================
    FRONTEND_URL: str = "http://localhost:5173"
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # ==================== Server Configuration ====================
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # ==================== Requests ====================
    DEFAULT_REQUEST_MESSAGE: str = "I'm interested in this room"
    MAX_REQUEST_MESSAGE_LENGTH: int = 1000
    ALLOW_DUPLICATE_PENDING_REQUESTS: bool = True

    # ==================== Features ====================
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ==================== Configuration Loading ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="allow",
        validate_default=True,
    )

    # ==================== Properties ====================
    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase credentials are present"""
        return bool(self.SUPABASE_URL and self.SUPABASE_KEY)


# ==================== Settings Singleton ====================
@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()


# ==================== Helper Functions ====================
def get_cors_origins() -> List[str]:
    """CORS origins, always including the configured frontend"""
    origins = list(settings.ALLOWED_ORIGINS)
    if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
        origins.append(settings.FRONTEND_URL)
    return origins
