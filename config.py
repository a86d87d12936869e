"""
Centralized Configuration Management

All environment variables are defined here using Pydantic Settings.
This provides validation, type safety, and documentation in one place.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (or a local .env file).

    To use in your code:
        from config import settings
        db_url = settings.DB_URL
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Database Configuration
    DB_URL: str = Field(..., description="MongoDB connection string")
    DB_NAME: str = Field(default="kickabout_dev", description="Database name")
    DB_TIMEOUT_SECONDS: float = Field(
        default=15.0, description="Deadline for a single database operation"
    )
    DB_RETRY_ATTEMPTS: int = Field(
        default=3, description="Attempts for a database call hitting a transient failure"
    )
    DB_RETRY_BASE_DELAY: float = Field(
        default=1.0, description="First backoff delay in seconds, doubled on each retry"
    )
    DB_MAX_POOL_SIZE: int = Field(default=10, description="Maximum MongoDB connection pool size")
    DB_MIN_POOL_SIZE: int = Field(default=5, description="Minimum MongoDB connection pool size")

    # Security
    SECRET_KEY: str = Field(..., description="JWT signing secret key")
    ACCESS_TOKEN_EXPIRE_MIN: int = Field(default=15, description="Access token lifetime")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, description="Refresh token lifetime")

    # Maps (handed to the browser, which renders the match map)
    GOOGLE_MAPS_API_KEY: str = Field(default="", description="Browser key for the maps API")

    # Application Settings
    DEBUG_LEVEL: int = Field(default=0, description="Debug verbosity level (0-3)")
    ENVIRONMENT: str = Field(
        default="development", description="Environment: development, staging, production"
    )

    # CORS Configuration
    CORS_ORIGINS: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )

    @field_validator("DEBUG_LEVEL")
    @classmethod
    def validate_debug_level(cls, v):
        if v not in [0, 1, 2, 3]:
            raise ValueError("DEBUG_LEVEL must be 0, 1, 2, or 3")
        return v

    @field_validator("DB_RETRY_ATTEMPTS")
    @classmethod
    def validate_retry_attempts(cls, v):
        if v < 1:
            raise ValueError("DB_RETRY_ATTEMPTS must be at least 1")
        return v

    def get_cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins into a list"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def uses_tls(self) -> bool:
        """Atlas style SRV connection strings need the certifi CA bundle"""
        return self.DB_URL.startswith("mongodb+srv://")

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT.lower() == "production"


# Singleton instance - import this throughout your application
settings = Settings()
