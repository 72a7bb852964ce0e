"""Shared protocol and types for window storage backends."""

from dataclasses import dataclass
from typing import Optional, Protocol

from pws_hourly.scroll_trigger import ScrollTriggerAdapter
from pws_hourly.window_controller import WindowController


@dataclass
class WindowEntry:
    """A view's controller together with the adapter observing its last row."""
    controller: WindowController
    adapter: ScrollTriggerAdapter

    def teardown(self) -> None:
        self.adapter.disconnect()
        self.controller.close()


class WindowStore(Protocol):
    """Protocol for window storage backends."""
    def create_window(self, entry: WindowEntry) -> str:
        """Persist a new window entry and return its id."""

    def get_window(self, window_id: str) -> Optional[WindowEntry]:
        """Fetch an entry by id, returning None if missing or expired."""

    def delete_window(self, window_id: str) -> None:
        """Tear down and delete an entry without raising if it is absent."""

    def clear(self) -> None:
        """Tear down and clear all stored windows."""
