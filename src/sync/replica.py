"""Subscriber-side copy of the draft, refreshed on every change notification."""

import logging
from typing import Callable, Dict, Optional

from src.draft_manager.draft_rules import NotInitialized
from src.draft_manager.draft_state import DraftState
from src.draft_manager.state_persistence import StoreError
from src.sync.broadcaster import ChangeNotification, NotificationChannel

logger = logging.getLogger(__name__)


class DraftReplica:
    """A viewer's local copy of the board.

    Notifications only say that something changed; the replica pulls the
    full state from the authoritative store each time. A fetch that comes
    back older than what is already held is discarded.
    """

    def __init__(self, fetch_state: Callable[[], DraftState], name: str = "viewer"):
        self.fetch_state = fetch_state
        self.name = name
        self.state: Optional[DraftState] = None
        self.refresh_count = 0
        self.last_error: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, channel: NotificationChannel) -> None:
        self.detach()
        self._unsubscribe = channel.subscribe(self.on_message)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def on_message(self, message: Dict) -> None:
        if ChangeNotification.from_dict(message) is None:
            logger.debug("%s ignoring message %r", self.name, message)
            return
        self.refresh()

    def refresh(self) -> Optional[DraftState]:
        """Pull the latest state; keeps the old copy if the read fails."""
        try:
            fresh = self.fetch_state()
        except NotInitialized:
            self.state = None
            self.last_error = None
            return None
        except StoreError as e:
            self.last_error = str(e)
            logger.warning("%s could not refresh draft: %s", self.name, e)
            return self.state

        self.refresh_count += 1
        self.last_error = None
        if self.state is not None and fresh.version < self.state.version:
            logger.debug(
                "%s discarding out-of-order read (v%d < v%d)",
                self.name,
                fresh.version,
                self.state.version,
            )
            return self.state

        self.state = fresh
        return fresh
