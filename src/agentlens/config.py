"""Configuration management for AgentLens."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="AGENTLENS_", extra="ignore"
    )

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    # Synthetic data generation
    random_seed: int = 42
    batch_multiplier: int = 3
    generation_window_sec: int = 7200

    # Cache
    cache_ttl_seconds: float = 30.0
    cache_stale_seconds: float = 300.0

    # Trust mathematics
    trust_excellent_threshold: int = 90
    trust_good_threshold: int = 70
    trust_fair_threshold: int = 50
    trust_poor_threshold: int = 30
    trust_decay_rate: float = 0.8

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
