"""Window manager facade over the window store."""
from typing import Optional, Tuple

from pws_hourly.config import settings
from pws_hourly.data_sources.base import WeatherDataSource
from pws_hourly.scroll_trigger import ScrollTriggerAdapter
from pws_hourly.window_controller import WindowController
from pws_hourly.window_store import InMemoryWindowStore, WindowEntry, WindowStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="window_manager")


def _init_store() -> WindowStore:
    """Initialize the backing window store based on configuration."""
    logger.debug(
        f"Initializing window store: ttl={settings.window_ttl_seconds}s, "
        f"max_age={settings.window_max_age_seconds or 'None'}"
    )
    return InMemoryWindowStore(
        ttl_seconds=settings.window_ttl_seconds,
        max_age_seconds=settings.window_max_age_seconds,
    )


_store: WindowStore = _init_store()


def use_in_memory_store_for_tests(ttl_seconds: int = 3600, max_age_seconds: int | None = None) -> None:
    """Override store for tests to ensure isolation and determinism."""
    global _store
    _store.clear()
    _store = InMemoryWindowStore(ttl_seconds=ttl_seconds, max_age_seconds=max_age_seconds)


def build_controller(source: WeatherDataSource) -> WindowController:
    """Controller wired with the configured backfill and offset parameters."""
    return WindowController(
        source,
        max_attempts=settings.backfill_max_attempts,
        extend_with_backfill=settings.extend_with_backfill,
        utc_offset_hours=settings.reference_utc_offset_hours,
    )


def create_window(source: WeatherDataSource) -> Tuple[str, WindowEntry]:
    """Create and store an idle controller + scroll adapter, returning its id."""
    controller = build_controller(source)
    entry = WindowEntry(controller=controller, adapter=ScrollTriggerAdapter(controller))
    window_id = _store.create_window(entry)
    logger.info("Created window %s", window_id)
    return window_id, entry


def get_window(window_id: str) -> Optional[WindowEntry]:
    """Fetch a window by ID, refreshing TTL if applicable."""
    return _store.get_window(window_id)


def delete_window(window_id: str) -> None:
    """Tear down a window by ID."""
    logger.info("Deleting window %s", window_id)
    _store.delete_window(window_id)


def clear_windows() -> None:
    """Tear down all windows (dev/testing)."""
    _store.clear()
