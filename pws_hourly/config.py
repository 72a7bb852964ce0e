"""Service configuration pulled from environment variables via pydantic."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")


class Settings(BaseSettings):
    """Environment-driven configuration for the hourly window service."""
    model_config = SettingsConfigDict(env_prefix="PWS_", extra="ignore")

    api_base_url: str = "http://localhost:8080"
    request_timeout_seconds: float = 10.0
    http_cache_name: str = ".cache"
    http_cache_backend: str = "sqlite"  # options: sqlite, memory, filesystem
    http_cache_ttl_seconds: int = 300
    http_retries: int = 3
    http_backoff_factor: float = 0.2

    record_source: str = "weather_api"  # options: weather_api, fixtures
    fixtures_dir: str = "./fixtures"

    backfill_max_attempts: int = Field(default=3, ge=0)
    extend_with_backfill: bool = False
    # Station-local day boundaries are UTC-05:00 regardless of DST.
    reference_utc_offset_hours: int = Field(default=-5, ge=-12, le=14)

    window_ttl_seconds: int = 3600
    window_max_age_seconds: int | None = None

    log_level: str = "INFO"
    port: int = 8000

    @field_validator("api_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4)}")
