"""
Core settings and environment variables for Ward Watch.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Ward Watch"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"  # "production" hides error details from clients
    API_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # In-memory document DB for local development and tests
    USE_MOCK_DB: bool = False

    # Live updates: a subscriber that cannot take an event within this many
    # seconds is skipped for that event
    PUBLISH_SEND_TIMEOUT: float = 2.0

    # Auth
    JWT_SECRET: str = "change-me-in-production-please-32-chars-min"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_HOURS: int = 24 * 7
    BCRYPT_ROUNDS: int = 12

    # Startup bootstrap
    SEED_ON_STARTUP: bool = True
    MUNICIPALITY_NAME: str = "Swatch Village"
    DEFAULT_WARD_COUNT: int = 10
    DEFAULT_ADMIN_NAME: str = "Admin User"
    DEFAULT_ADMIN_EMAIL: str = "admin@swatchvillage.com"
    DEFAULT_ADMIN_PASSWORD: str = "admin123"
    DEFAULT_ADMIN_WARD: int = 1

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


# Global settings instance
settings = Settings()
