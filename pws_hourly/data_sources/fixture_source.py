"""File-backed data source for offline development and demos.

Layout: `{root}/{station}/{YYYY-MM-DD}.json`, each file holding the JSON array
the backend would return for that single day. A missing file is a day with
no observations.
"""

from __future__ import annotations

import datetime as dt
import json
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from pws_hourly.date_walker import parse_date, today_in_reference_zone
from pws_hourly.domain import HourlyRecord, parse_hourly_payload
from pws_hourly.errors import FetchFailed
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="fixture_source")


class FixtureWeatherSource:
    """Serve hourly records from per-day JSON files under a root directory."""

    def __init__(self, root: str | Path, *, utc_offset_hours: int = -5) -> None:
        self.root = Path(root)
        self.utc_offset_hours = utc_offset_hours

    def fetch_hourly(
        self,
        station: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[HourlyRecord]:
        """Concatenate the day files for [start, end], oldest day first."""
        first = parse_date(start or today_in_reference_zone(self.utc_offset_hours))
        last = parse_date(end) if end else first
        out: List[HourlyRecord] = []
        day = first
        while day <= last:
            out.extend(self._read_day(station, day))
            day += dt.timedelta(days=1)
        return out

    def _read_day(self, station: str, day: dt.date) -> List[HourlyRecord]:
        path = self.root / station / f"{day.isoformat()}.json"
        if not path.is_file():
            logger.debug("No fixture for %s on %s", station, day)
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
            return parse_hourly_payload(payload, station)
        except (OSError, ValidationError, ValueError) as exc:
            logger.error("Unreadable fixture %s: %s", path, exc)
            raise FetchFailed(station, day.isoformat(), day.isoformat(), str(exc)) from exc

    def fetch_stations(self) -> List[str]:
        """Sub-directory names under the root, sorted."""
        if not self.root.is_dir():
            logger.warning("Fixture directory %s does not exist", self.root)
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_dir())
