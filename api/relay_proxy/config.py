"""Configuration management for the Relay Proxy API."""

from typing import List
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application settings
    app_name: str = "Relay Proxy API"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream REST API settings
    upstream_base_url: str = "https://www.anapioficeandfire.com/api"
    upstream_timeout: float = 30.0
    upstream_max_connections: int = 20
    # Issued cursors are only valid while this stays fixed
    upstream_page_size: int = 50

    # CORS settings
    cors_origins: List[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["GET", "OPTIONS"]
    cors_allow_headers: List[str] = ["*"]

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Connection settings
    default_first: int = 10
    max_first: int = 100
    max_expand_depth: int = 3

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("upstream_page_size", "max_first", "max_expand_depth")
    @classmethod
    def validate_positive(cls, v):
        """Validate sizes that must be at least one."""
        if v < 1:
            raise ValueError("Value must be a positive integer")
        return v

    @field_validator("upstream_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": True,
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
