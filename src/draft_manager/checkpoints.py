"""Named draft checkpoints - bounded, persisted snapshots of full state."""

import logging
import secrets
from dataclasses import dataclass
from typing import Dict, List, Optional

from src.draft_manager.config import (
    CHECKPOINTS_KEY,
    MAX_CHECKPOINT_NAME_LENGTH,
    MAX_CHECKPOINTS,
)
from src.draft_manager.draft_rules import InvalidInput, NotFound
from src.draft_manager.draft_state import DraftState, utc_now
from src.draft_manager.state_persistence import BlobStore

logger = logging.getLogger(__name__)


@dataclass
class Checkpoint:
    """A named point-in-time copy of the draft."""

    id: str
    name: str
    created_at: str
    state: Dict

    def summary(self) -> Dict:
        return {"id": self.id, "name": self.name, "createdAt": self.created_at}

    def to_dict(self) -> Dict:
        return {**self.summary(), "state": self.state}

    @classmethod
    def from_dict(cls, data: Dict) -> "Checkpoint":
        return cls(
            id=data["id"],
            name=data["name"],
            created_at=data["createdAt"],
            state=data["state"],
        )


class CheckpointManager:
    """Append-only checkpoint list, oldest evicted first once over the cap."""

    def __init__(self, store: BlobStore, max_checkpoints: int = MAX_CHECKPOINTS):
        self.store = store
        self.max_checkpoints = max_checkpoints

    def _load_all(self) -> List[Checkpoint]:
        document = self.store.get(CHECKPOINTS_KEY) or {}
        raw = document.get("checkpoints")
        if not isinstance(raw, list):
            return []

        checkpoints = []
        for entry in raw:
            try:
                checkpoints.append(Checkpoint.from_dict(entry))
            except (KeyError, TypeError) as e:
                logger.warning("Skipping malformed checkpoint entry: %s", e)
        return checkpoints

    def _save_all(self, checkpoints: List[Checkpoint]) -> None:
        self.store.set(
            CHECKPOINTS_KEY, {"checkpoints": [cp.to_dict() for cp in checkpoints]}
        )

    def list(self) -> List[Dict]:
        """Checkpoint summaries in creation order."""
        return [cp.summary() for cp in self._load_all()]

    def save(self, name: Optional[str], state: DraftState) -> Dict:
        """Persist a snapshot of *state* under *name*.

        Returns:
            Summary of the saved checkpoint.
        """
        if not isinstance(state, DraftState):
            raise InvalidInput("Missing or invalid state for checkpoint save.")

        now = utc_now()
        clean_name = name.strip() if isinstance(name, str) else ""
        if not clean_name:
            clean_name = f"Checkpoint {now}"

        checkpoint = Checkpoint(
            id=f"cp-{now}-{secrets.token_hex(4)}",
            name=clean_name[:MAX_CHECKPOINT_NAME_LENGTH],
            created_at=now,
            state=state.to_dict(),
        )

        checkpoints = self._load_all()
        checkpoints.append(checkpoint)
        if len(checkpoints) > self.max_checkpoints:
            dropped = checkpoints[: len(checkpoints) - self.max_checkpoints]
            checkpoints = checkpoints[len(dropped):]
            logger.info(
                "Evicted %d oldest checkpoint(s): %s",
                len(dropped),
                ", ".join(cp.name for cp in dropped),
            )

        self._save_all(checkpoints)
        logger.info("Saved checkpoint %s (%s)", checkpoint.name, checkpoint.id)
        return checkpoint.summary()

    def load(self, checkpoint_id: str) -> Checkpoint:
        """Fetch a stored checkpoint by id.

        Raises:
            InvalidInput: If no id was given.
            NotFound: If no checkpoint has that id.
        """
        wanted = checkpoint_id.strip() if isinstance(checkpoint_id, str) else ""
        if not wanted:
            raise InvalidInput("Missing checkpoint id.")

        for checkpoint in self._load_all():
            if checkpoint.id == wanted:
                return checkpoint
        raise NotFound("Checkpoint not found.")
