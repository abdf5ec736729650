"""
Authoritative draft store - applies actions and broadcasts changes.

Holds the single live draft document. Every write loads the current
state, runs the matching transition from ``draft_actions``, persists the
result with a compare-and-set on the state version, then publishes a
payload-free change notification. A publish failure after a successful
write is logged and reported, never treated as a failed write.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from src.draft_manager.config import DRAFT_STATE_KEY
from src.draft_manager.draft_actions import get_handler
from src.draft_manager.draft_rules import DraftActionError, NotInitialized, StaleWrite
from src.draft_manager.draft_state import DraftState
from src.draft_manager.history import HistoryStack
from src.draft_manager.state_persistence import BlobStore, StoreError, VersionConflict
from src.sync.broadcaster import ChangeNotification, NotificationChannel, PublishError

logger = logging.getLogger(__name__)

# Actions whose prior state is worth rolling back to
HISTORY_ACTIONS = {"init", "pick", "editPick", "reset", "undo", "replace"}

# Actions that put a (possibly new) celebrity name on the board
VALIDATED_ACTIONS = {"pick": "celebrityName", "editPick": "newCelebrityName"}


@dataclass
class ActionResult:
    """Outcome of an accepted action."""

    state: Optional[DraftState]
    changed: bool
    notified: bool

    def to_dict(self) -> Dict:
        return {
            "success": True,
            "state": self.state.to_dict() if self.state else None,
            "changed": self.changed,
            "notified": self.notified,
        }


class DraftService:
    """Single source of truth for the draft room."""

    def __init__(
        self,
        store: BlobStore,
        channel: Optional[NotificationChannel] = None,
        history: Optional[HistoryStack] = None,
        validation_queue=None,
    ):
        self.store = store
        self.channel = channel or NotificationChannel()
        self.history = history if history is not None else HistoryStack()
        self.validation_queue = validation_queue

    def load_state(self) -> Optional[DraftState]:
        """Read the live draft; None when it has never been initialized."""
        document = self.store.get(DRAFT_STATE_KEY)
        if document is None:
            return None
        try:
            return DraftState.from_dict(document)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StoreError(f"Stored draft state is malformed: {e}") from e

    def get_state(self) -> DraftState:
        """Read the live draft.

        Raises:
            NotInitialized: If no draft exists yet.
        """
        state = self.load_state()
        if state is None:
            raise NotInitialized("No draft state found.")
        return state

    def apply(
        self,
        action: str,
        payload: Optional[Mapping] = None,
        expected_version: Optional[int] = None,
        record_history: bool = True,
    ) -> ActionResult:
        """
        Run an action against the live draft and persist the result.

        Args:
            action: Action name (init, pick, editPick, reset, undo,
                applyValidation, replace)
            payload: Action fields as sent by the client
            expected_version: Version the client based its intent on;
                a mismatch is rejected instead of overwriting
            record_history: Push the prior state on the history stack

        Returns:
            ActionResult with the new state

        Raises:
            DraftActionError: If the action is rejected (state unchanged)
            StoreError: If the durable slot is unreachable
        """
        handler = get_handler(action)
        payload = payload or {}

        current = self.load_state()
        base_version = current.version if current else 0
        if expected_version is not None and expected_version != base_version:
            raise StaleWrite(
                f"Draft changed since version {expected_version} "
                f"(now {base_version}); refresh and retry."
            )

        try:
            new_state = handler(current, payload)
        except DraftActionError as e:
            logger.warning("Rejected %s: %s", action, e)
            raise

        if new_state is current:
            logger.debug("%s was a no-op", action)
            return ActionResult(state=current, changed=False, notified=False)

        new_state.version = base_version + 1
        try:
            self.store.compare_and_set(DRAFT_STATE_KEY, base_version, new_state.to_dict())
        except VersionConflict as e:
            logger.warning("Rejected stale %s: %s", action, e)
            raise StaleWrite(
                "Draft changed while this action was processed; refresh and retry."
            ) from e

        if record_history and current is not None and action in HISTORY_ACTIONS:
            self.history.push(current)

        notified = self.notify(new_state.updated_at)
        self._queue_validation(action, payload)

        logger.info(
            "Applied %s (version %d, pick index %d, status %s)",
            action,
            new_state.version,
            new_state.current_pick_index,
            new_state.status.value,
        )
        return ActionResult(state=new_state, changed=True, notified=notified)

    def rollback(self) -> ActionResult:
        """Restore the state as it was before the most recent recorded action."""
        previous = self.history.pop()
        try:
            return self.apply("replace", {"state": previous}, record_history=False)
        except Exception:
            self.history.push(previous)
            raise

    def restore(self, state_document: Mapping) -> ActionResult:
        """Replace the live draft with a stored snapshot (e.g. a checkpoint)."""
        return self.apply("replace", {"state": state_document})

    def notify(self, updated_at: str) -> bool:
        """Publish a change notification; False if delivery failed."""
        try:
            self.channel.publish(ChangeNotification(updated_at=updated_at))
            return True
        except PublishError as e:
            logger.warning("State persisted but notification failed: %s", e)
            return False

    def _queue_validation(self, action: str, payload: Mapping) -> None:
        field_name = VALIDATED_ACTIONS.get(action)
        if field_name is None or self.validation_queue is None:
            return
        name = payload.get(field_name)
        if isinstance(name, str) and name.strip():
            self.validation_queue.submit(name.strip())

    def apply_validation_result(self, celebrity_name: str, validation: Dict) -> ActionResult:
        """Callback for the background validation worker."""
        return self.apply(
            "applyValidation",
            {"celebrityName": celebrity_name, "validation": validation},
        )
