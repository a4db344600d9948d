from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MongoDB Configuration
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "storefront_db"

    # JWT Configuration
    JWT_SECRET_KEY: str = "change-me-in-production"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080  # 7 days

    # Application Settings
    BACKEND_CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    API_V1_PREFIX: str = "/api"
    PROJECT_NAME: str = "Storefront"
    LOG_LEVEL: str = "INFO"
    PLACEHOLDER_IMAGE_PATH: str = "/api/placeholder/300/300"

    # Cart client
    CART_API_BASE_URL: str = "http://localhost:8000"
    CART_STORAGE_DIR: str = ".storefront"
    TOKEN_STORAGE_KEY: str = "token"
    CART_STORAGE_KEY: str = "cart"
    PENDING_ITEM_STORAGE_KEY: str = "pendingCartItem"
    CART_STORAGE_VERSION: str = "1.0"
    CART_TTL_DAYS: int = 7
    CART_RESYNC_DELAY_SECONDS: float = 0.1
    CART_NOTIFICATION_SECONDS: float = 3.0
    LOGIN_PATH: str = "/login"
    REQUEST_TIMEOUT_SECONDS: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
