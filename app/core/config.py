# Defines application-wide settings using pydantic-settings' BaseSettings
# Manages environment variables for various aspects of the application:
# API configuration (version, project name)
# Security settings (secret key, JWT algorithm, token lifetime)
# Database connection details
# Asset storage (local filesystem or S3-compatible object storage)
# Feed settings (page size)


import os
import json
from typing import Annotated, List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Blog Feed API"
    VERSION: str = "0.1.0"

    # Server URLs
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # Security
    SECRET_KEY: str = os.getenv("SECRET_KEY", "development_secret_key")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60  # 1 hour
    ALGORITHM: str = "HS256"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./blog.db")

    # CORS
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:3000",     # Local frontend development
    ]

    # Asset storage: "local" writes under UPLOAD_DIRECTORY, "s3" uses the bucket below
    STORAGE_BACKEND: str = os.getenv("STORAGE_BACKEND", "local")
    UPLOAD_DIRECTORY: str = os.getenv("UPLOAD_DIRECTORY", "uploads")
    UPLOAD_KEY_PREFIX: str = "uploads"
    ALLOWED_IMAGE_TYPES: List[str] = ["image/png", "image/jpg", "image/jpeg"]
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5 MB

    # S3 / S3-compatible object storage
    S3_ENDPOINT: str = os.getenv("S3_ENDPOINT", "")
    S3_REGION: str = os.getenv("S3_REGION", "ap-south-1")
    S3_ACCESS_KEY_ID: str = os.getenv("S3_ACCESS_KEY_ID", "")
    S3_SECRET_ACCESS_KEY: str = os.getenv("S3_SECRET_ACCESS_KEY", "")
    S3_BUCKET_NAME: str = os.getenv("S3_BUCKET_NAME", "blog-feed-media")
    S3_PUBLIC_URL: str = os.getenv("S3_PUBLIC_URL", "")

    # Feed
    POSTS_PER_PAGE: int = 2

    # Development settings - set these differently in production
    DEBUG: bool = os.getenv("DEBUG", "False").lower() in ["true", "1", "t"]
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            # Handle JSON string format
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return []
        return v

    @field_validator("STORAGE_BACKEND")
    @classmethod
    def check_storage_backend(cls, v: str) -> str:
        v = v.lower()
        if v not in ("local", "s3"):
            raise ValueError("STORAGE_BACKEND must be 'local' or 's3'")
        return v

# Create settings instance
settings = Settings()
