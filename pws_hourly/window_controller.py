"""Incremental date-windowed loader for one station's hourly table.

The controller owns a single `LoadWindow`. Selecting a station or jumping to a
date installs a fresh window and backfills it; scrolling to the bottom
extends the current window one day further into the past. Every await is
followed by an identity check against `self.window`, so results for a window
that has since been replaced (or closed) are dropped instead of being merged
into the new one.
"""
from __future__ import annotations

import itertools
from typing import Callable, List, Optional, Tuple

from pws_hourly.backfill import DEFAULT_MAX_ATTEMPTS, load_with_backfill
from pws_hourly.data_sources.base import WeatherDataSource
from pws_hourly.date_walker import (
    DEFAULT_UTC_OFFSET_HOURS,
    parse_date,
    previous_date,
    today_in_reference_zone,
)
from pws_hourly.domain import HourlyRecord, LoadWindow, WindowSnapshot, WindowState
from pws_hourly.errors import BackfillExhausted, HourlyWindowError, NoStationSelected
from pws_hourly.table_view import build_table
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="window_controller")

Listener = Callable[[WindowSnapshot], None]


class WindowController:
    """Select / jump / extend operations over one station's load window."""

    def __init__(
        self,
        source: WeatherDataSource,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        extend_with_backfill: bool = False,
        utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
        today: Optional[Callable[[], str]] = None,
    ) -> None:
        self._source = source
        self.max_attempts = max_attempts
        self.extend_with_backfill = extend_with_backfill
        self.utc_offset_hours = utc_offset_hours
        self._today = today or (lambda: today_in_reference_zone(utc_offset_hours))
        self.state = WindowState.IDLE
        self.window: Optional[LoadWindow] = None
        self._window_ids = itertools.count(1)
        self._listeners: List[Listener] = []

    # -- read side ---------------------------------------------------------

    @property
    def station(self) -> Optional[str]:
        return self.window.station_code if self.window else None

    @property
    def records(self) -> List[HourlyRecord]:
        return list(self.window.records) if self.window else []

    @property
    def is_loading(self) -> bool:
        return self.state is WindowState.LOADING or bool(self.window and self.window.is_loading)

    @property
    def can_extend(self) -> bool:
        """True when a backward extension would actually run."""
        return (
            self.state is WindowState.READY
            and self.window is not None
            and self.window.can_extend
            and not self.window.is_loading
        )

    def snapshot(self) -> WindowSnapshot:
        window = self.window
        if window is None:
            return WindowSnapshot(state=self.state)
        table = build_table(window.records)
        return WindowSnapshot(
            state=self.state,
            station_code=window.station_code,
            current_date=window.current_date,
            earliest_loaded_date=window.earliest_loaded_date,
            attempted_dates=list(window.attempted_dates),
            is_loading=self.is_loading,
            can_extend=self.can_extend,
            last_error=window.last_error,
            columns=table.columns,
            rows=table.rows,
            record_count=len(window.records),
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("Window listener %r failed", listener)

    # -- guards --------------------------------------------------------------

    def _require_station(self, station: Optional[str] = None) -> str:
        station = station or self.station
        if not station:
            raise NoStationSelected("no station selected")
        return station

    def _is_current(self, window: LoadWindow) -> bool:
        return self.window is window

    def _open_window(self, station: str, *, carry_over: bool) -> LoadWindow:
        previous = self.window
        window = LoadWindow(
            window_id=next(self._window_ids),
            station_code=station,
            is_loading=True,
            can_extend=False,
        )
        if carry_over and previous is not None and previous.station_code == station:
            # Keep the old rows on screen until the replacement arrives.
            window.records = list(previous.records)
            window.earliest_loaded_date = previous.earliest_loaded_date
            window.current_date = previous.current_date
        self.window = window
        self.state = WindowState.LOADING
        self._notify()
        return window

    # -- operations ----------------------------------------------------------

    async def select_station(self, station: Optional[str]) -> WindowSnapshot:
        """Start a fresh window for `station`, backfilling from today."""
        if not station:
            if self.window is not None:
                logger.info("Station cleared; discarding window for %s", self.window.station_code)
            self.window = None
            self.state = WindowState.IDLE
            self._notify()
            return self.snapshot()

        today = self._today()
        logger.info("Selecting station %s starting at %s", station, today)
        window = self._open_window(station, carry_over=False)
        await self._load_into(window, today)
        return self.snapshot()

    async def jump_to_date(self, date: str, station: Optional[str] = None) -> WindowSnapshot:
        """Replace the window with the nearest data on or before `date`.

        A malformed `date` raises ValueError before any state changes.
        """
        try:
            station = self._require_station(station)
        except NoStationSelected:
            logger.debug("Ignoring jump to %s: no station selected", date)
            return self.snapshot()

        target = parse_date(date).isoformat()
        logger.info("Jumping %s to %s", station, target)
        window = self._open_window(station, carry_over=True)
        await self._load_into(window, target)
        return self.snapshot()

    async def _load_into(self, window: LoadWindow, date: str) -> None:
        try:
            result = await load_with_backfill(
                self._source,
                window.station_code,
                date,
                max_attempts=self.max_attempts,
                utc_offset_hours=self.utc_offset_hours,
            )
        except BackfillExhausted as exc:
            if not self._is_current(window):
                logger.info("Discarding stale backfill failure for window %d", window.window_id)
                return
            window.attempted_dates = list(exc.attempted_dates)
            window.last_error = str(exc)
            self._settle(window, WindowState.ERROR, can_extend=False)
            return
        except Exception:
            if self._is_current(window):
                window.last_error = "Failed to fetch hourly weather data."
                self._settle(window, WindowState.ERROR, can_extend=False)
            raise

        if not self._is_current(window):
            logger.info(
                "Discarding stale result for window %d (%s on %s)",
                window.window_id, window.station_code, result.date,
            )
            return
        window.records = list(result.records)
        window.earliest_loaded_date = result.date
        window.current_date = result.date
        window.attempted_dates = list(result.attempted_dates)
        window.last_error = None
        self._settle(window, WindowState.READY, can_extend=True)

    def _settle(self, window: LoadWindow, state: WindowState, *, can_extend: bool) -> None:
        window.is_loading = False
        window.can_extend = can_extend
        self.state = state
        self._notify()

    async def extend_backward(self) -> bool:
        """Append the day before `earliest_loaded_date`; single-flight.

        Returns True when records were appended (possibly zero of them for an
        empty day), False when the call was dropped, failed, or went stale.
        """
        try:
            self._require_station()
        except NoStationSelected:
            logger.debug("Ignoring extend: no station selected")
            return False
        window = self.window
        if not self.can_extend or window is None or window.earliest_loaded_date is None:
            logger.debug("Ignoring extend: window busy or not ready (state=%s)", self.state.value)
            return False

        window.can_extend = False
        window.is_loading = True
        self._notify()
        target = previous_date(window.earliest_loaded_date, utc_offset_hours=self.utc_offset_hours)
        try:
            records, produced = await self._fetch_extension(window.station_code, target)
        except HourlyWindowError as exc:
            if not self._is_current(window):
                logger.info("Discarding stale extension failure for window %d", window.window_id)
                return False
            logger.warning("Failed to fetch more hourly weather data for %s: %s", window.station_code, exc)
            window.last_error = str(exc)
            if isinstance(exc, BackfillExhausted) and exc.attempted_dates:
                window.earliest_loaded_date = exc.attempted_dates[-1]
            return False
        else:
            if not self._is_current(window):
                logger.info("Discarding stale extension for window %d (%s)", window.window_id, produced)
                return False
            window.records.extend(records)
            window.earliest_loaded_date = produced
            window.last_error = None
            logger.debug("Extended %s back to %s (+%d records)", window.station_code, produced, len(records))
            return True
        finally:
            if self._is_current(window):
                window.is_loading = False
                window.can_extend = True
                self._notify()

    async def _fetch_extension(self, station: str, target: str) -> Tuple[List[HourlyRecord], str]:
        if self.extend_with_backfill:
            result = await load_with_backfill(
                self._source,
                station,
                target,
                max_attempts=self.max_attempts,
                utc_offset_hours=self.utc_offset_hours,
            )
            return result.records, result.date
        return list(await self._source.fetch_hourly(station, target, target)), target

    async def on_last_item_visible(self) -> bool:
        """Entry point for "last row visible" notifications."""
        if not self.can_extend:
            logger.debug("Last row visible while busy; trigger dropped")
            return False
        return await self.extend_backward()

    def close(self) -> None:
        """Tear down the window and detach listeners."""
        if self.window is not None:
            logger.debug("Closing window %d for %s", self.window.window_id, self.window.station_code)
        self.window = None
        self.state = WindowState.IDLE
        self._notify()
        self._listeners.clear()
