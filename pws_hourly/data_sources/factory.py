"""Factory helpers for choosing a hourly data source at startup."""

from __future__ import annotations

from pws_hourly import config
from pws_hourly.data_sources.base import CallableWeatherDataSource, WeatherDataSource
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "weather_api"


def build_data_source(settings: config.Settings | None = None) -> WeatherDataSource:
    """Instantiate the configured hourly data source."""
    settings = settings or config.settings
    source = (settings.record_source or DEFAULT_SOURCE_NAME).lower()

    if source == "weather_api":
        from .weather_api_client import fetch_hourly_weather, fetch_stations

        logger.info("Using weather API data source", extra={"base_url": mask_url(settings.api_base_url)})
        return CallableWeatherDataSource(hourly=fetch_hourly_weather, stations=fetch_stations)

    if source == "fixtures":
        from .fixture_source import FixtureWeatherSource

        if not settings.fixtures_dir:
            raise ValueError("fixtures_dir must be set for the fixtures data source")
        logger.info("Using fixture data source", extra={"fixtures_dir": settings.fixtures_dir})
        fixtures = FixtureWeatherSource(
            settings.fixtures_dir,
            utc_offset_hours=settings.reference_utc_offset_hours,
        )
        return CallableWeatherDataSource(hourly=fixtures.fetch_hourly, stations=fixtures.fetch_stations)

    raise ValueError(f"Unknown record source '{source}'")
