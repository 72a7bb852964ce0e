"""Helpers for fetching hourly observations and stations from the weather backend API."""
from __future__ import annotations

from typing import Any, List, Optional

import requests
import requests_cache
from pydantic import ValidationError
from retry_requests import retry

from pws_hourly.config import settings
from pws_hourly.date_walker import parse_date, today_in_reference_zone
from pws_hourly.domain import HourlyRecord, parse_hourly_payload
from pws_hourly.errors import FetchFailed
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag="weather_api_client")


def build_session() -> requests.Session:
    """Cached, retrying session; past days rarely change, today's rows do."""
    cache_session = requests_cache.CachedSession(
        settings.http_cache_name,
        backend=settings.http_cache_backend,
        expire_after=settings.http_cache_ttl_seconds,
    )
    return retry(cache_session, retries=settings.http_retries, backoff_factor=settings.http_backoff_factor)


session = build_session()


def _hourly_url(station: str) -> str:
    return f"{settings.api_base_url}/weather/{station}/hourly"


def _stations_url() -> str:
    return f"{settings.api_base_url}/stations/"


def _get_json(url: str, *, params: Optional[dict] = None) -> Any:
    """GET a JSON body; requests errors and bad JSON surface as requests/ValueError."""
    resp = session.get(
        url,
        params=params,
        headers={"accept": "application/json"},
        timeout=settings.request_timeout_seconds,
    )
    resp.raise_for_status()
    return resp.json()


def fetch_hourly_weather(
    station: str,
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[HourlyRecord]:
    """Fetch hourly records for `station` over [start, end], inclusive.

    `start` defaults to today in the reference offset and `end` to `start`.
    Every failure mode collapses to FetchFailed.
    """
    start = parse_date(start).isoformat() if start else today_in_reference_zone(settings.reference_utc_offset_hours)
    end = parse_date(end).isoformat() if end else start

    url = _hourly_url(station)
    logger.info("Fetching hourly weather data from %s (start=%s end=%s)", mask_url(url), start, end)
    try:
        payload = _get_json(url, params={"start": start, "end": end})
        records = parse_hourly_payload(payload, station)
    except requests.RequestException as exc:
        logger.error("Failed to fetch hourly weather data for %s: %s", station, exc)
        raise FetchFailed(station, start, end, str(exc)) from exc
    except (ValidationError, ValueError) as exc:
        logger.error("Malformed hourly payload for %s: %s", station, exc)
        raise FetchFailed(station, start, end, f"malformed upstream response: {exc}") from exc

    logger.debug("Got %d hourly records for %s on %s..%s", len(records), station, start, end)
    return records


def _station_code(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        for key in ("station_code", "code"):
            if item.get(key):
                return str(item[key])
    raise ValueError(f"unrecognized station entry: {item!r}")


def fetch_stations() -> List[str]:
    """Return station codes from the backend's station directory."""
    url = _stations_url()
    logger.info("Fetching stations from %s", mask_url(url))
    try:
        payload = _get_json(url)
        if not isinstance(payload, list):
            raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
        return [_station_code(item) for item in payload]
    except requests.RequestException as exc:
        logger.error("Failed to fetch stations: %s", exc)
        raise FetchFailed("*", None, None, str(exc)) from exc
    except ValueError as exc:
        logger.error("Malformed station directory response: %s", exc)
        raise FetchFailed("*", None, None, f"malformed upstream response: {exc}") from exc
