"""Interfaces and helpers for hourly weather data sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

from starlette.concurrency import run_in_threadpool

from pws_hourly.domain import HourlyRecord


class WeatherDataSource(Protocol):
    """Anything that can list stations and return hourly records for a date range."""

    async def fetch_hourly(
        self,
        station: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[HourlyRecord]:
        """Return the station's hourly records for [start, end], inclusive.

        Raises FetchFailed when the upstream is unreachable, answers non-2xx,
        or returns something that is not a list of hourly records.
        """
        ...

    async def fetch_stations(self) -> List[str]:
        """Return the available station codes."""
        ...


@dataclass
class CallableWeatherDataSource:
    """Adapter that turns blocking fetch functions into an awaitable data source.

    The wrapped callables run in starlette's worker thread pool so the event
    loop is never blocked on network or disk I/O.
    """

    hourly: Callable[[str, Optional[str], Optional[str]], List[HourlyRecord]]
    stations: Callable[[], List[str]]

    async def fetch_hourly(
        self,
        station: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[HourlyRecord]:
        return await run_in_threadpool(self.hourly, station, start, end)

    async def fetch_stations(self) -> List[str]:
        return await run_in_threadpool(self.stations)
