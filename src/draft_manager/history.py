"""Session-owned history of prior draft snapshots for multi-step rollback."""

import copy
import logging
from collections import deque
from typing import Optional

from src.draft_manager.config import MAX_HISTORY_SNAPSHOTS
from src.draft_manager.draft_rules import NotFound
from src.draft_manager.draft_state import DraftState

logger = logging.getLogger(__name__)


class HistoryStack:
    """Bounded LIFO of immutable snapshots; the oldest falls off when full."""

    def __init__(self, max_snapshots: int = MAX_HISTORY_SNAPSHOTS):
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self.max_snapshots = max_snapshots
        self._snapshots = deque(maxlen=max_snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def push(self, state: DraftState) -> None:
        if len(self._snapshots) == self.max_snapshots:
            logger.debug("History full, dropping oldest snapshot")
        self._snapshots.append(copy.deepcopy(state))

    def pop(self) -> DraftState:
        """Remove and return the most recent snapshot.

        Raises:
            NotFound: If there is nothing to roll back to.
        """
        if not self._snapshots:
            raise NotFound("No earlier draft state to roll back to.")
        return self._snapshots.pop()

    def peek(self) -> Optional[DraftState]:
        if not self._snapshots:
            return None
        return copy.deepcopy(self._snapshots[-1])

    def snapshots(self):
        """Copies of the retained snapshots, oldest first."""
        return [copy.deepcopy(s) for s in self._snapshots]

    def clear(self) -> None:
        self._snapshots.clear()
