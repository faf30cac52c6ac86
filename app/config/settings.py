"""
Environment configuration for the hostel grievance portal.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.
"""

import json
from typing import List, Union
from pathlib import Path
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application configuration
    APP_NAME: str = Field(default="Hostel Grievance Portal", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="v1", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: Union[List[str], str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Upstream hostel REST API
    UPSTREAM_API_BASE_URL: str = Field(
        default="http://localhost:8080/api",
        alias="API_BASE_URL",
    )
    API_TIMEOUT_SECONDS: float = 15.0
    UPLOAD_PATH_TEMPLATE: str = "/complaints/{id}/attachments"

    # Client-local persisted state (presets, drafts, sessions)
    STORAGE_BACKEND: str = "file"  # file | redis | memory
    STORAGE_DIR: str = "storage"
    REDIS_URL: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    REDIS_KEY_PREFIX: str = "grievance-portal:"

    # Business logic
    DRAFT_MAX_AGE_HOURS: int = 24
    STRICT_APOLOGY_STATUS_FILTER: bool = True

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        populate_by_name=True,
        extra="ignore",  # ignore unrelated keys in .env
    )

    # Validators
    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator('STORAGE_BACKEND')
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        """Restrict the storage backend to the supported implementations"""
        v = v.lower().strip()
        if v not in ("file", "redis", "memory"):
            raise ValueError("STORAGE_BACKEND must be one of: file, redis, memory")
        return v

    @field_validator('UPSTREAM_API_BASE_URL')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def get_redis_url(self) -> str:
        """Get Redis URL"""
        return self.REDIS_URL

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
