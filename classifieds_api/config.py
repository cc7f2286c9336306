"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, hashing cost and environment variables.
"""

from pydantic import field_validator, ValidationInfo
from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from the environment or a .env file."""

    # Application configuration
    app_name: str = "Real Estate Classifieds API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    log_level: Optional[str] = None

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/classifieds"

    # JWT configuration - the secret has no default on purpose
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7

    # Password hashing
    bcrypt_rounds: int = 10

    # API configuration
    api_prefix: str = "/api"

    # Pagination defaults
    default_page_size: int = 10
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v, info: ValidationInfo):
        """Validate JWT secret key presence and strength."""
        if not v or not v.strip():
            raise ValueError("JWT_SECRET_KEY is required")
        if info.data.get("environment") == "production" and len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long in production")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v):
        """bcrypt work factor must be at least 10."""
        if v < 10 or v > 31:
            raise ValueError("BCRYPT_ROUNDS must be between 10 and 31")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def effective_log_level(self) -> str:
        """Explicit LOG_LEVEL wins, otherwise DEBUG in development and INFO elsewhere."""
        if self.log_level:
            return self.log_level.upper()
        return "DEBUG" if self.is_development else "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    A missing JWT_SECRET_KEY fails here, at startup, rather than per request.
    """
    return Settings()


# Global settings instance
settings = get_settings()
