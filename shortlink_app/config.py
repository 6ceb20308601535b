from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    
    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """
    
    # Environment
    environment: str = "development"
    debug: bool = False
    
    # Application
    app_name: str = "URL Shortener Service"
    app_version: str = "1.0.0"
    
    # Server
    host: str = "127.0.0.1"
    port: int = 5000
    
    # Database
    database_url: str = "sqlite:///./shortlinks.db"
    database_echo: bool = False
    
    # Public links are "{base_url}/{shortcode}"; when unset the
    # request's own base URL is used instead.
    base_url: Optional[str] = None
    
    # Short URL lifecycle
    default_validity_minutes: int = 30
    shortcode_length: int = 6
    shortcode_fallback_length: int = 8
    shortcode_max_retries: int = 5  # attempts per length tier
    deactivate_expired_on_stats: bool = False
    
    # Logging
    log_level: str = "INFO"
    log_json: bool = False
    log_file: Optional[str] = None
    
    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """Settings for the running process (read once)."""
    return Settings()
