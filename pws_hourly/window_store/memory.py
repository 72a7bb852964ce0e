"""In-memory window store with TTL."""

import threading
import time
import uuid
from typing import Any, Optional

from pws_hourly.window_store.base import WindowEntry, WindowStore
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="window_store/in_memory_window_store")


class InMemoryWindowStore(WindowStore):
    """Thread-safe, TTL-aware in-memory store of live windows."""

    def __init__(self, ttl_seconds: int = 3600, max_age_seconds: int | None = None) -> None:
        """Initialize the store with a TTL (seconds) and optional absolute max age."""
        logger.debug("Initializing InMemoryWindowStore")
        self.ttl = ttl_seconds
        self.max_age = max_age_seconds
        self._windows: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _expired(self, exp: float, created_at: float) -> bool:
        """Return True if the window is beyond TTL or absolute max age."""
        now = time.monotonic()
        if exp < now:
            return True
        if self.max_age is None:
            return False
        return now - created_at > self.max_age

    def _next_expiry(self, created_at: float) -> float:
        """Compute the next expiry time, capped by absolute max age."""
        now = time.monotonic()
        next_exp = now + self.ttl
        if self.max_age is None:
            return next_exp
        return min(next_exp, created_at + self.max_age)

    def _generate_id(self) -> str:
        return str(uuid.uuid4())

    def _evict(self, window_id: str) -> None:
        """Drop an entry and tear it down; caller holds the lock."""
        data = self._windows.pop(window_id, None)
        if data:
            logger.debug("Evicting window %s", window_id)
            data["entry"].teardown()

    def _sweep(self) -> None:
        """Evict every expired entry; caller holds the lock."""
        expired = [
            wid for wid, data in self._windows.items()
            if self._expired(data["exp"], data["created_at"])
        ]
        for wid in expired:
            self._evict(wid)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def create_window(self, entry: WindowEntry) -> str:
        """Sweep expired entries, then store a new entry and return its id."""
        with self._lock:
            self._sweep()
            wid = self._generate_id()
            created_at = time.monotonic()
            self._windows[wid] = {
                "entry": entry,
                "created_at": created_at,
                "exp": self._next_expiry(created_at),
            }
            return wid

    def get_window(self, window_id: str) -> Optional[WindowEntry]:
        """Return the entry, refreshing TTL, or None if missing/expired."""
        with self._lock:
            data = self._windows.get(window_id)
            if not data:
                return None
            if self._expired(data["exp"], data["created_at"]):
                self._evict(window_id)
                return None
            # refresh TTL on access
            data["exp"] = self._next_expiry(data["created_at"])
            return data["entry"]

    def delete_window(self, window_id: str) -> None:
        """Tear down and remove an entry if it exists."""
        with self._lock:
            self._evict(window_id)

    def clear(self) -> None:
        """Tear down and clear all windows."""
        with self._lock:
            for wid in list(self._windows):
                self._evict(wid)
