"""
API configuration settings.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings


class APIConfig(BaseSettings):
    """API configuration settings."""

    # API Settings
    api_title: str = "Bookworm API"
    api_version: str = "1.0.0"
    api_description: str = "Book discovery, reviews and reading lists"

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 4000
    debug: bool = False
    log_level: str = "INFO"

    # CORS Settings
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = False
    cors_allow_methods: List[str] = ["GET", "POST", "DELETE"]
    cors_allow_headers: List[str] = ["Content-Type", "Authorization"]

    # Frontend pages (login.html, app.html) and their assets
    static_dir: Optional[str] = "static"

    model_config = {
        "env_file": ".env",
        "extra": "ignore"  # Ignore extra fields from .env
    }


# Global config instance
config = APIConfig()
