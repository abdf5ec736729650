"""Draft initialization - creates new draft instances from the room roster."""

import logging
from typing import Any, Iterable, List, Optional

from src.draft_manager.config import (
    DEFAULT_CELEBRITIES,
    DEFAULT_ROUNDS,
    MAX_ROUNDS,
    MIN_ROUNDS,
    PRECONFIGURED_DRAFTERS,
)
from src.draft_manager.draft_state import (
    Celebrity,
    DraftConfig,
    Drafter,
    DraftState,
    DraftStatus,
    utc_now,
)

logger = logging.getLogger(__name__)


class DraftInitializer:
    """Handles creation of new draft instances."""

    def __init__(self, roster: Optional[List[dict]] = None):
        self.roster = roster if roster is not None else PRECONFIGURED_DRAFTERS

    def create_draft(
        self, total_rounds: Any = DEFAULT_ROUNDS, celebrity_list: Any = None
    ) -> DraftState:
        """
        Create a new draft instance, ignoring any existing state.

        Args:
            total_rounds: Requested rounds; clamped to [1, 200], invalid
                input falls back to the default of 3
            celebrity_list: Starting pool of names; blanks are dropped and
                duplicates (case-insensitive) collapsed. None uses the
                default pool

        Returns:
            DraftState ready to begin drafting
        """
        rounds = self.clamp_rounds(total_rounds)
        if celebrity_list is None:
            celebrity_list = self.get_default_celebrities()
        names = self.clean_celebrity_names(celebrity_list)
        drafters = [Drafter.from_dict(d) for d in self.roster]

        now = utc_now()
        state = DraftState(
            status=DraftStatus.NOT_STARTED,
            config=DraftConfig(total_rounds=rounds),
            drafters=drafters,
            picks=[],
            celebrities=[
                Celebrity(id=f"c-{idx}", name=name) for idx, name in enumerate(names)
            ],
            current_round=1,
            current_pick_index=0,
            created_at=now,
            updated_at=now,
        )

        logger.info(
            "Created draft: %d drafters, %d rounds, %d celebrities in pool",
            len(drafters),
            rounds,
            len(names),
        )
        return state

    @staticmethod
    def clamp_rounds(total_rounds: Any) -> int:
        """Clamp a requested round count into the supported range."""
        try:
            rounds = int(total_rounds)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_ROUNDS
        if isinstance(total_rounds, bool) or rounds <= 0:
            return DEFAULT_ROUNDS
        return max(MIN_ROUNDS, min(MAX_ROUNDS, rounds))

    @staticmethod
    def clean_celebrity_names(celebrity_list: Any) -> List[str]:
        """Trim, drop blanks, and dedupe names keeping the first spelling."""
        if not isinstance(celebrity_list, Iterable) or isinstance(
            celebrity_list, (str, bytes, dict)
        ):
            return []

        seen = set()
        names = []
        for raw in celebrity_list:
            if not isinstance(raw, str):
                continue
            name = raw.strip()
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            names.append(name)
        return names

    @staticmethod
    def get_default_celebrities() -> List[str]:
        """Get the starter celebrity pool."""
        return list(DEFAULT_CELEBRITIES)
