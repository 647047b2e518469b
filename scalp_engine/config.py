"""Deployment configuration."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from scalp_engine.models.config import EngineConfig


class Settings(BaseSettings):
    """Settings loaded from ``SCALP_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="SCALP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Service
    staleness_tolerance_bars: int = 2
    alert_history_size: int = 50
    buffer_size: int = 500

    # Engine overrides
    rvol_threshold: float = 1.7
    push_confidence_threshold: int = 72
    opposite_direction_cooldown_seconds: float = 180.0

    def engine_config(self) -> EngineConfig:
        """Build the engine thresholds with the overrides applied."""
        return EngineConfig(
            rvol_threshold=self.rvol_threshold,
            push_confidence_threshold=self.push_confidence_threshold,
            opposite_direction_cooldown_seconds=self.opposite_direction_cooldown_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
