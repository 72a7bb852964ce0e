"""Calendar-day arithmetic in the stations' fixed reference offset."""
from __future__ import annotations

import datetime as dt

DEFAULT_UTC_OFFSET_HOURS = -5


def reference_zone(utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> dt.timezone:
    """Fixed-offset tzinfo used for every day boundary."""
    return dt.timezone(dt.timedelta(hours=utc_offset_hours))


def parse_date(value: str | dt.date) -> dt.date:
    """Parse an ISO `YYYY-MM-DD` date; ValueError on anything else."""
    if isinstance(value, dt.datetime):
        raise ValueError(f"expected a calendar date, got datetime {value!r}")
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value).strip())


def previous_date(value: str | dt.date, *, utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> str:
    """Return the ISO date one calendar day before `value`.

    The day is anchored at local midnight in the reference offset, so the
    result does not depend on the host's time zone.
    """
    tz = reference_zone(utc_offset_hours)
    midnight = dt.datetime.combine(parse_date(value), dt.time.min, tzinfo=tz)
    return (midnight - dt.timedelta(days=1)).astimezone(tz).date().isoformat()


def today_in_reference_zone(
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
    *,
    now: dt.datetime | None = None,
) -> str:
    """Return today's ISO date as seen in the reference offset."""
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    return now.astimezone(reference_zone(utc_offset_hours)).date().isoformat()
