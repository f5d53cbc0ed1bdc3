"""
Configuration
Loads environment variables and provides typed settings.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Remote grammar source
    grammar_provider: str = "placeholder"  # "placeholder" or "languagetool"
    languagetool_url: str = "https://api.languagetool.org/v2"
    languagetool_language: str = "en-US"
    languagetool_timeout: float = 30.0  # seconds, enforced by the HTTP client

    # Resilience (debounce + retry for the remote source)
    debounce_seconds: float = 1.5
    retry_max_retries: int = 3
    retry_base_delay: float = 1.0  # doubles per attempt

    # Input limits
    max_text_length: int = 50000
    min_tone_length: int = 20
    min_readability_length: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
