"""
Application Configuration
"""
from functools import lru_cache
from typing import List, Literal, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # App
    APP_NAME: str = "Polling Chat Room"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    API_PREFIX: str = "/api"

    # Chat
    CHAT_PASSWORD: str = "456"
    DEFAULT_MESSAGE_LIMIT: int = 50
    MAX_MESSAGE_LIMIT: int = 200

    # Store
    STORE_BACKEND: Literal["memory", "sql"] = "memory"
    DATABASE_URL: str = "sqlite://"  # in-memory SQLite, gone on restart

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    LOG_FILE: Optional[str] = None

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["*"]

    # Polling client
    CLIENT_MESSAGE_POLL_INTERVAL: float = 3.0  # seconds
    CLIENT_PRESENCE_POLL_INTERVAL: float = 5.0  # seconds

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
