"""Application configuration using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 1
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    block_private_addresses: bool = True  # Reject domains resolving to private IPs

    # Redis (optional - required only for the redis scan store / RQ worker)
    redis_url: RedisDsn | None = None

    # Scan records
    scan_store_backend: Literal["memory", "redis"] = "memory"
    scan_record_ttl_seconds: int = 86400  # 24 hours
    scan_sync_timeout_seconds: float = 25.0  # Wall-clock ceiling for sync scans
    scan_estimated_seconds: int = 12

    # Crawler
    crawler_user_agent: str = "Mozilla/5.0 (compatible; CitableBot/1.0; +https://citable.app/bot)"
    crawler_agent_token: str = "citablebot"  # Name matched in robots.txt user-agent groups
    crawler_timeout: float = 5.0
    crawler_robots_timeout: float = 3.0
    crawler_max_redirects: int = 5
    crawler_max_candidates: int = 4

    # Coverage matching
    coverage_match_threshold: float = 0.35

    # Classifier (language model credentials, first configured wins)
    anthropic_api_key: str | None = None
    openrouter_api_key: str | None = None
    openai_api_key: str | None = None
    classifier_model: str | None = None  # Provider default when unset
    classifier_timeout_seconds: float = 15.0
    classifier_max_tokens: int = 400
    classifier_temperature: float = 0.1

    # Sentry
    sentry_dsn: str | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.env == "test"

    @property
    def classifier_enabled(self) -> bool:
        """Check if a language model credential is configured."""
        return bool(self.anthropic_api_key or self.openrouter_api_key or self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
