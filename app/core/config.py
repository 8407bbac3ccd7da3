"""
Configuration settings for the application
"""

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Application
    APP_NAME: str = "DevEvent API"
    LOG_LEVEL: str = "INFO"

    # DynamoDB
    DYNAMODB_ENDPOINT_URL: Optional[str] = None
    DYNAMODB_TABLE_NAME: str = "DevEvent"
    AWS_DEFAULT_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    DB_CONNECT_TIMEOUT: float = 10.0
    DB_READ_TIMEOUT: float = 45.0

    # Image uploads
    S3_ENDPOINT_URL: Optional[str] = None
    IMAGE_BUCKET: str = "devevent-images"
    IMAGE_BASE_URL: Optional[str] = None
    IMAGE_FOLDER: str = "DevEvent"
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024  # 5MB

    # CORS
    ALLOW_ORIGINS: List[str] = ["http://localhost:3000"]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
