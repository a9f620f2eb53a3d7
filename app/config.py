"""Application settings loaded from environment variables via pydantic-settings."""

from enum import StrEnum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    json = "json"
    console = "console"


class Settings(BaseSettings):
    """Runtime configuration sourced from AGRIGUARD_* env vars or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AGRIGUARD_",
        case_sensitive=False,
    )

    # ── Redis (optional live feed) ──────────────────────────────────────────
    redis_url: str = "redis://localhost:6379/0"
    redis_enabled: bool = False

    # ── Sensor freshness ────────────────────────────────────────────────────
    sensor_liveness_minutes: float = 5.0
    sensor_staleness_hours: float = 6.0
    # Device clocks may run ahead of ours by at most this much.
    sensor_max_clock_skew_minutes: float = 5.0

    # ── Device command outbox ───────────────────────────────────────────────
    command_outbox_limit: int = 100
    command_ttl_minutes: float = 60.0

    # ── Weather ─────────────────────────────────────────────────────────────
    weather_staleness_hours: float = 24.0
    rain_skip_probability_pct: float = 70.0

    # ── Irrigation policy ───────────────────────────────────────────────────
    # None keeps the per-soil over-saturation bound from the soil table.
    irrigation_stop_moisture_pct: float | None = None
    irrigation_refill_fraction: float = 0.85
    irrigation_carryover_days: float = 1.0

    # ── Voice router ────────────────────────────────────────────────────────
    min_intent_confidence: float = 0.15

    # ── Farm defaults ───────────────────────────────────────────────────────
    default_crop: str = "wheat"
    default_soil: str = "loamy"
    default_days_since_sowing: int = 45
    default_plot_size_ha: float = 1.0

    # ── Observability ───────────────────────────────────────────────────────
    log_level: str = "info"
    log_format: LogFormat = LogFormat.json


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
