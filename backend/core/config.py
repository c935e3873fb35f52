"""
Application configuration management
"""

from typing import Annotated, List
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """Application settings"""

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # API Settings
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "File Compressor"

    # CORS Settings
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000", "http://localhost:8000"]

    # Upload Settings
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50MB per file
    MAX_BATCH_FILES: int = 50

    # Image Reduction Settings
    IMAGE_MAX_SIZE_MB: float = 1.0
    IMAGE_MAX_WIDTH_OR_HEIGHT: int = 1200  # longer edge, pixels
    IMAGE_MAX_ITERATIONS: int = 10

    # Download Settings
    DOWNLOAD_PREFIX: str = "compressed-"
    ARCHIVE_FILENAME: str = "compressed-files.zip"
    DOWNLOAD_SPOOL_MAX_SIZE: int = 8 * 1024 * 1024  # spill to disk above 8MB

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @property
    def image_max_size_bytes(self) -> int:
        return int(self.IMAGE_MAX_SIZE_MB * 1024 * 1024)


# Create settings instance
settings = Settings()
