"""Bridge "last row became visible" events to backward extension.

The adapter watches exactly one row key, the current last row. It re-attaches
whenever the last row changes and whenever an in-flight load settles, and it
fires at most once per attachment, so a bottom row that stays on screen while
a fetch is running does not flood the controller with triggers.
"""
from __future__ import annotations

from typing import Optional

from pws_hourly.domain import WindowSnapshot
from pws_hourly.window_controller import WindowController
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="scroll_trigger")


class ScrollTriggerAdapter:
    def __init__(self, controller: WindowController) -> None:
        self._controller = controller
        self._observed_key: Optional[str] = None
        self._armed = False
        self._was_loading = controller.is_loading
        self._unsubscribe = controller.subscribe(self._on_window_changed)
        self.attach(controller.snapshot().last_row_key)

    @property
    def observed_key(self) -> Optional[str]:
        return self._observed_key

    @property
    def armed(self) -> bool:
        return self._armed

    def attach(self, row_key: Optional[str]) -> None:
        """Observe `row_key` (None detaches) and arm a single trigger."""
        if row_key != self._observed_key:
            logger.debug("Re-attaching scroll trigger from %s to %s", self._observed_key, row_key)
        self._observed_key = row_key
        self._armed = row_key is not None

    def _on_window_changed(self, snapshot: WindowSnapshot) -> None:
        last_key = snapshot.last_row_key
        settled = self._was_loading and not snapshot.is_loading
        self._was_loading = snapshot.is_loading
        if last_key != self._observed_key or settled:
            self.attach(last_key)

    async def handle_visibility(self, row_key: str, is_visible: bool = True) -> bool:
        """Report a visibility change for `row_key`; True if an extension ran."""
        if not is_visible or row_key != self._observed_key:
            return False
        if not self._armed:
            logger.debug("Trigger for %s already fired; waiting for re-attach", row_key)
            return False
        if self._controller.is_loading or not self._controller.can_extend:
            return False
        logger.info("Reached the bottom of the table at %s", row_key)
        self._armed = False
        return await self._controller.on_last_item_visible()

    def disconnect(self) -> None:
        self._unsubscribe()
        self._observed_key = None
        self._armed = False
