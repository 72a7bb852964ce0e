"""Walk backward day by day until a station reports hourly data."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from pws_hourly.data_sources.base import WeatherDataSource
from pws_hourly.date_walker import DEFAULT_UTC_OFFSET_HOURS, parse_date, previous_date
from pws_hourly.domain import HourlyRecord
from pws_hourly.errors import BackfillExhausted, FetchFailed
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="backfill")

DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class BackfillResult:
    """Records for the nearest day with data, and the day that produced them."""
    date: str
    records: List[HourlyRecord]
    attempted_dates: List[str] = field(default_factory=list)


async def load_with_backfill(
    source: WeatherDataSource,
    station: str,
    date: str,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
) -> BackfillResult:
    """Fetch `date`, stepping back one day per empty result.

    At most `max_attempts + 1` single-day fetches are issued, strictly one
    after another. A failed fetch counts as an empty day. Raises
    BackfillExhausted once the bound is reached without data.
    """
    if max_attempts < 0:
        raise ValueError(f"max_attempts must be >= 0, got {max_attempts}")

    current = parse_date(date).isoformat()
    attempted: List[str] = []
    last_error: Optional[FetchFailed] = None
    attempt = 0

    while True:
        attempted.append(current)
        try:
            records = await source.fetch_hourly(station, current, current)
        except FetchFailed as exc:
            logger.warning("Attempt %d failed for %s on %s: %s", attempt + 1, station, current, exc.reason)
            last_error = exc
            records = []

        if records:
            if attempt:
                logger.info("Backfilled %s from %s to %s after %d attempts", station, date, current, attempt + 1)
            return BackfillResult(date=current, records=list(records), attempted_dates=attempted)

        logger.debug("No hourly data for %s on %s (attempt %d)", station, current, attempt + 1)
        if attempt >= max_attempts:
            break
        current = previous_date(current, utc_offset_hours=utc_offset_hours)
        attempt += 1

    logger.warning("Backfill exhausted for %s from %s; tried %s", station, date, ", ".join(attempted))
    raise BackfillExhausted(station, date, attempted) from last_error
