"""Environment-driven configuration with Pydantic v2."""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings driven entirely by environment variables."""

    # Server Configuration
    host: str = Field(default="0.0.0.0", env="HOST")
    port: int = Field(default=3010, env="PORT", ge=1024, le=65535)
    debug: bool = Field(default=False, env="DEBUG")
    workers: int = Field(default=1, env="WORKERS", ge=1, le=8)

    # Security
    cors_origins: List[str] = Field(default=["http://localhost:3000"], env="CORS_ORIGINS")

    # Records backend (managed PostgREST service)
    records_url: str = Field(default="http://localhost:54321", env="RECORDS_URL")
    records_api_key: Optional[str] = Field(default=None, env="RECORDS_API_KEY")
    records_timeout: float = Field(default=10.0, env="RECORDS_TIMEOUT", ge=1.0, le=120.0)

    # Cache Configuration
    cache_default_ttl_ms: int = Field(default=300_000, env="CACHE_DEFAULT_TTL_MS", ge=1000)  # 5 minutes
    cache_sweep_interval: int = Field(default=600, env="CACHE_SWEEP_INTERVAL", ge=10)  # seconds

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, env="RATE_LIMIT_ENABLED")
    rate_limit_general_window_ms: int = Field(default=60_000, env="RATE_LIMIT_GENERAL_WINDOW_MS", ge=1000)
    rate_limit_general_max_requests: int = Field(default=100, env="RATE_LIMIT_GENERAL_MAX_REQUESTS", ge=1)
    rate_limit_auth_window_ms: int = Field(default=300_000, env="RATE_LIMIT_AUTH_WINDOW_MS", ge=1000)
    rate_limit_auth_max_requests: int = Field(default=5, env="RATE_LIMIT_AUTH_MAX_REQUESTS", ge=1)
    rate_limit_sensitive_window_ms: int = Field(default=60_000, env="RATE_LIMIT_SENSITIVE_WINDOW_MS", ge=1000)
    rate_limit_sensitive_max_requests: int = Field(default=20, env="RATE_LIMIT_SENSITIVE_MAX_REQUESTS", ge=1)
    rate_limit_cleanup_interval: int = Field(default=300, env="RATE_LIMIT_CLEANUP_INTERVAL", ge=10)  # seconds

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_format: str = Field(default="json", env="LOG_FORMAT")
    log_file: Optional[str] = Field(default=None, env="LOG_FILE")

    @field_validator("records_url")
    @classmethod
    def strip_records_url(cls, v):
        """Drop trailing slash so paths can be joined directly."""
        return v.rstrip("/")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug

    model_config = {
        "env_file": "../.env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "forbid",
        "env_parse_none_str": "none",
        "env_nested_delimiter": "__",
    }
