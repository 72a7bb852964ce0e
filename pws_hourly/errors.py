"""Exceptions raised by the hourly loader."""

from __future__ import annotations

from typing import Sequence


class HourlyWindowError(Exception):
    """Base class for loader errors."""


class FetchFailed(HourlyWindowError):
    """A single hourly request failed (unreachable, non-2xx, or malformed body)."""

    def __init__(self, station: str, start: str | None, end: str | None, reason: str) -> None:
        self.station = station
        self.start = start
        self.end = end
        self.reason = reason
        super().__init__(f"Failed to fetch hourly weather data for {station} ({start}..{end}): {reason}")


class BackfillExhausted(HourlyWindowError):
    """No date within the attempt bound returned any records."""

    def __init__(self, station: str, requested_date: str, attempted_dates: Sequence[str]) -> None:
        self.station = station
        self.requested_date = requested_date
        self.attempted_dates = list(attempted_dates)
        super().__init__(
            f"No hourly weather data available for {station} on or before {requested_date}."
        )


class NoStationSelected(HourlyWindowError):
    """Operation requested without a station.

    Raised by the controller's entry guard and caught by the operation, which
    then no-ops: having no station is a valid transient UI state.
    """
