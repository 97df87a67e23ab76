"""
profilehub/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, base URL, storage credentials)
- Capability flags that select image/delete behaviour
- Validates configuration on startup
"""

from dataclasses import dataclass
from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


@dataclass(frozen=True)
class Capabilities:
    """Feature set the registration service runs with."""

    base_url: str
    image_mode: str = "none"
    max_images: int = 7
    delete_enabled: bool = False
    redact_secret_on_read: bool = False


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """
    
    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    
    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="profilehub",
        description="MongoDB database name"
    )
    MONGODB_USERS_COLLECTION: str = Field(
        default="users",
        description="Collection holding user profiles"
    )
    
    # Profile links
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:5173/user/",
        description="Prefix joined with the unique slug to build profile URLs"
    )
    
    # Capabilities
    IMAGE_MODE: Literal["none", "single", "multiple"] = Field(
        default="none",
        description="Whether createUser accepts no image, one image or several"
    )
    MAX_IMAGES: int = Field(
        default=7,
        description="Maximum images accepted in multiple mode"
    )
    ENABLE_DELETE: bool = Field(
        default=False,
        description="Require a 4-digit secret on create and expose deleteUser"
    )
    REDACT_SECRET_ON_READ: bool = Field(
        default=False,
        description="Drop the stored secret from GET /user responses"
    )
    
    # Blob storage
    BLOB_BACKEND: Literal["local", "s3", "memory"] = Field(
        default="local",
        description="Where uploaded images are stored"
    )
    UPLOAD_DIR: str = Field(
        default="uploads",
        description="Directory for locally stored uploads"
    )
    UPLOADS_URL_PREFIX: str = Field(
        default="/uploads",
        description="Path prefix local uploads are served under"
    )
    PUBLIC_SERVER_URL: str = Field(
        default="http://localhost:5000",
        description="Public origin of this server (for local upload URLs)"
    )
    S3_BUCKET: Optional[str] = Field(default=None, description="S3 bucket for uploads")
    S3_REGION: Optional[str] = Field(default=None, description="S3 region")
    S3_ENDPOINT_URL: Optional[str] = Field(
        default=None,
        description="Custom endpoint for S3-compatible storage"
    )
    S3_PUBLIC_BASE_URL: Optional[str] = Field(
        default=None,
        description="Public URL prefix for uploaded objects (CDN or custom domain)"
    )
    S3_KEY_PREFIX: str = Field(default="profile-images/", description="Object key prefix")
    AWS_ACCESS_KEY_ID: Optional[str] = Field(default=None)
    AWS_SECRET_ACCESS_KEY: Optional[str] = Field(default=None)
    
    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    HOST: str = Field(default="0.0.0.0", description="Listen address")
    PORT: int = Field(default=5000, description="Listen port")
    
    @validator("MAX_IMAGES")
    def validate_max_images(cls, v):
        """A profile never holds more than seven images."""
        if v < 1 or v > 7:
            raise ValueError("MAX_IMAGES must be between 1 and 7")
        return v
    
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"
    
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"
    
    @property
    def uploads_enabled(self) -> bool:
        return self.IMAGE_MODE != "none"
    
    def capabilities(self) -> Capabilities:
        """Capability record handed to the registration service."""
        return Capabilities(
            base_url=self.PUBLIC_BASE_URL,
            image_mode=self.IMAGE_MODE,
            max_images=self.MAX_IMAGES,
            delete_enabled=self.ENABLE_DELETE,
            redact_secret_on_read=self.REDACT_SECRET_ON_READ,
        )
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def validate_settings(config: Optional[Settings] = None):
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    config = config or settings
    errors = []
    
    if not config.MONGODB_URL:
        errors.append("MONGODB_URL is required")
    
    if not config.PUBLIC_BASE_URL:
        errors.append("PUBLIC_BASE_URL is required")
    
    if config.uploads_enabled and config.BLOB_BACKEND == "s3" and not config.S3_BUCKET:
        errors.append("S3_BUCKET is required when BLOB_BACKEND=s3")
    
    if config.uploads_enabled and config.BLOB_BACKEND == "local" and not config.PUBLIC_SERVER_URL:
        errors.append("PUBLIC_SERVER_URL is required for local uploads")
    
    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")
    
    return True
