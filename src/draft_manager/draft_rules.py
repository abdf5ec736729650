"""Draft rule enforcement: rejection reasons and snake turn order."""

from typing import Iterator, List, Optional

from src.draft_manager.draft_state import Drafter, DraftState


class DraftActionError(Exception):
    """Raised when an action violates draft rules.

    Each subclass carries a machine-readable ``reason`` tag that the
    store and API hand back to the caller alongside the message.
    """

    reason = "DraftActionError"

    def to_dict(self) -> dict:
        return {"success": False, "reason": self.reason, "error": str(self)}


class NotInitialized(DraftActionError):
    reason = "NotInitialized"

    def __init__(self, message: str = "Draft has not been initialized yet."):
        super().__init__(message)


class InvalidInput(DraftActionError):
    reason = "InvalidInput"


class UnknownDrafter(DraftActionError):
    reason = "UnknownDrafter"


class NotYourTurn(DraftActionError):
    reason = "NotYourTurn"


class AlreadyDrafted(DraftActionError):
    reason = "AlreadyDrafted"


class DuplicateName(DraftActionError):
    reason = "DuplicateName"


class NotFound(DraftActionError):
    reason = "NotFound"


class StaleWrite(DraftActionError):
    reason = "StaleWrite"


class Forbidden(DraftActionError):
    reason = "Forbidden"


def seat_order(drafters: List[Drafter]) -> List[Drafter]:
    """Drafters sorted by ascending draft order."""
    return sorted(drafters, key=lambda d: d.order)


def round_for_index(pick_index: int, num_drafters: int) -> int:
    """1-based round number containing the given linear pick index."""
    return pick_index // num_drafters + 1


def current_drafter(
    drafters: List[Drafter], total_rounds: int, pick_index: int
) -> Optional[Drafter]:
    """Drafter on the clock for a linear pick index (handles snake draft logic).

    Returns None when there are no drafters or every slot has been used.
    """
    per_round = len(drafters)
    if per_round == 0 or pick_index < 0 or pick_index >= total_rounds * per_round:
        return None

    round_index = pick_index // per_round
    position = pick_index % per_round

    if round_index % 2 == 1:  # Odd (0-based) rounds run N-1 -> 0
        seat = per_round - 1 - position
    else:
        seat = position

    return seat_order(drafters)[seat]


def draft_order(drafters: List[Drafter], total_rounds: int) -> Iterator[Drafter]:
    """Yield the drafter for every slot of the draft, first pick to last."""
    for pick_index in range(total_rounds * len(drafters)):
        yield current_drafter(drafters, total_rounds, pick_index)


def on_the_clock(state: DraftState) -> Optional[Drafter]:
    """Drafter whose turn it currently is."""
    return current_drafter(
        state.drafters, state.config.total_rounds, state.current_pick_index
    )
