"""
API Configuration
Settings and configuration for the Haystack FI marketplace service.
"""

import json
from typing import List, Optional, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class APISettings(BaseSettings):
    """
    API configuration settings.

    Loaded from environment variables (and .env).
    """

    # API Info
    app_name: str = "Haystack FI Marketplace API"
    version: str = "0.1.0"
    description: str = "Marketplace connecting financial institutions with technology vendors"

    # Server settings
    host: str = Field(default="0.0.0.0", alias="API_HOST")
    port: int = Field(default=3001, alias="API_PORT")
    reload: bool = Field(default=False, alias="API_RELOAD")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    # CORS settings
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="API_CORS_ORIGINS",
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: List[str] = ["*"]
    cors_allow_headers: List[str] = ["*"]

    # Database settings
    database_url: str = Field(default="sqlite:///./haystackfi.db", alias="DATABASE_URL")
    db_pool_size: int = Field(default=20, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=10, alias="DB_MAX_OVERFLOW")
    seed_mock_data: bool = Field(default=True, alias="SEED_MOCK_DATA")

    # Redis settings
    redis_host: str = Field(default="localhost", alias="REDIS_HOST")
    redis_port: int = Field(default=6379, alias="REDIS_PORT")
    redis_db: int = Field(default=1, alias="REDIS_DB")

    # Caching
    enable_cache: bool = Field(default=True, alias="API_ENABLE_CACHE")
    cache_ttl_search: int = Field(default=120, alias="API_CACHE_TTL_SEARCH")  # 2 min

    # Authentication
    jwt_secret_key: str = Field(default="change-me-in-production", alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")
    refresh_token_expire_days: int = Field(default=7, alias="REFRESH_TOKEN_EXPIRE_DAYS")
    action_token_expire_hours: int = Field(default=24, alias="ACTION_TOKEN_EXPIRE_HOURS")
    bcrypt_rounds: int = Field(default=12, alias="BCRYPT_ROUNDS")

    # Background tasks
    celery_broker_url: str = Field(default="redis://localhost:6379/0", alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(
        default="redis://localhost:6379/0", alias="CELERY_RESULT_BACKEND"
    )
    celery_task_always_eager: bool = Field(default=False, alias="CELERY_TASK_ALWAYS_EAGER")
    research_llm_model: str = Field(default="haystack-research-mock-v1", alias="RESEARCH_LLM_MODEL")
    research_stale_after_hours: int = Field(default=6, alias="RESEARCH_STALE_AFTER_HOURS")

    # Logging
    log_level: str = Field(default="INFO", alias="API_LOG_LEVEL")

    # Performance targets
    target_p95_latency_ms: int = 150
    slow_request_ms: int = 300

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> List[str]:
        """Parse CORS origins from JSON string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                # Fall back to comma-separated list
                return [origin.strip() for origin in v.split(",")]
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        env_prefix="",
        validate_default=True,
        populate_by_name=True,
    )


# Global settings instance
_settings: Optional[APISettings] = None


def get_settings() -> APISettings:
    """Get global API settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = APISettings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
