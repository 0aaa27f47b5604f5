"""
Configuration management using environment variables.
Handles database, authentication, search proxy and logging settings
with proper validation and defaults.
"""

from typing import Optional
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Used only when JWT_SECRET is unset; startup logs a warning whenever it is active
DEV_FALLBACK_SECRET = "devsecret"


class BookwormConfig(BaseSettings):
    """
    Configuration class for the Bookworm backend.
    Uses pydantic BaseSettings for environment variable management.
    """

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="bookworm")
    users_collection: str = Field(default="users")
    reviews_collection: str = Field(default="reviews")
    reading_list_collection: str = Field(default="reading_list")

    # Authentication Configuration
    jwt_secret: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")
    token_expire_days: int = Field(default=7)
    bcrypt_rounds: int = Field(default=10)
    allowed_email_domain: str = Field(default="gmail.com")

    # Book Search Proxy
    search_url: str = Field(default="https://openlibrary.org/search.json")
    search_timeout: float = Field(default=10.0)
    default_search_query: str = Field(default="bestsellers")

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")
    log_file: Optional[str] = Field(default=None)

    # Development/Testing
    debug: bool = Field(default=False)
    test_mode: bool = Field(default=False)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from .env
    )

    @field_validator('bcrypt_rounds')
    @classmethod
    def validate_bcrypt_rounds(cls, v):
        """Ensure the bcrypt cost is within the range bcrypt accepts."""
        if v < 4 or v > 31:
            raise ValueError('bcrypt_rounds must be between 4 and 31')
        return v

    @field_validator('token_expire_days')
    @classmethod
    def validate_token_expire_days(cls, v):
        """Ensure token validity window is positive."""
        if v < 1:
            raise ValueError('token_expire_days must be at least 1')
        return v

    @field_validator('allowed_email_domain')
    @classmethod
    def validate_email_domain(cls, v):
        """Store the domain without a leading '@'."""
        v = v.strip().lower().lstrip('@')
        if not v:
            raise ValueError('allowed_email_domain must not be empty')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'log_level must be one of: {valid_levels}')
        return v.upper()

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v):
        """Ensure log format is valid."""
        valid_formats = ['json', 'console']
        if v.lower() not in valid_formats:
            raise ValueError(f'log_format must be one of: {valid_formats}')
        return v.lower()

    def get_log_file_path(self) -> Optional[Path]:
        """Get log file path as Path object."""
        if self.log_file:
            return Path(self.log_file)
        return None

    def get_jwt_secret(self) -> str:
        """Signing secret, falling back to the insecure development secret."""
        return self.jwt_secret or DEV_FALLBACK_SECRET

    def uses_fallback_secret(self) -> bool:
        """Check whether tokens are signed with the development secret."""
        return not self.jwt_secret

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug and not self.test_mode


# Global configuration instance
config = BookwormConfig()
