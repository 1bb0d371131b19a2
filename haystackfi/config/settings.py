"""
Client configuration settings for the Haystack FI marketplace.
Loads from HAYSTACK_* environment variables or .env file.
"""

from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache


class ClientSettings(BaseSettings):
    """Settings for the API client and session layer"""

    # API
    api_base_url: str = "http://localhost:3001"
    request_timeout: float = 10.0

    # Session persistence
    storage_path: Path = Path.home() / ".haystackfi" / "session.json"

    # Token refresh (access token expires in 15 minutes, refresh at 14)
    access_token_lifetime_seconds: int = 15 * 60
    refresh_lead_seconds: int = 60

    class Config:
        env_prefix = "HAYSTACK_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Ignore extra fields in .env file


@lru_cache()
def get_client_settings() -> ClientSettings:
    """Get cached client settings instance"""
    return ClientSettings()
