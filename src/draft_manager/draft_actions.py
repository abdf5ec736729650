"""Draft actions - pure state transitions for every draft intent.

Each handler takes the current ``DraftState`` (or None before the first
``init``) plus the request payload and returns a replacement state. The
input state is never mutated. Rejections raise a ``DraftActionError``
subclass so the caller can leave the live state untouched.
"""

import copy
import logging
from typing import Callable, Dict, Mapping, Optional

from src.draft_manager.draft_initializer import DraftInitializer
from src.draft_manager.draft_rules import (
    AlreadyDrafted,
    DuplicateName,
    InvalidInput,
    NotFound,
    NotInitialized,
    NotYourTurn,
    UnknownDrafter,
    on_the_clock,
    round_for_index,
)
from src.draft_manager.draft_state import (
    Celebrity,
    Drafter,
    DraftState,
    DraftStatus,
    Pick,
    utc_now,
)

logger = logging.getLogger(__name__)

ActionHandler = Callable[[Optional[DraftState], Mapping], DraftState]


def _text(payload: Mapping, key: str) -> str:
    """Trimmed string field from a payload, or '' when missing/non-string."""
    value = payload.get(key)
    return value.strip() if isinstance(value, str) else ""


def _require_state(state: Optional[DraftState]) -> DraftState:
    if state is None:
        raise NotInitialized()
    return copy.deepcopy(state)


def _ensure_celebrity(state: DraftState, name: str) -> Celebrity:
    """Return the pool entry for *name*, inserting a new one if novel."""
    celeb = state.find_celebrity(name)
    if celeb is None:
        celeb = Celebrity(id=f"c-{len(state.celebrities)}", name=name)
        state.celebrities.append(celeb)
    return celeb


def _resolve_seat(state: DraftState, drafter_id: str, drafter_name: str) -> Drafter:
    seat = state.find_drafter(drafter_id) if drafter_id else None
    if seat is None and drafter_name:
        wanted = drafter_name.lower()
        seat = next((d for d in state.drafters if d.name.lower() == wanted), None)
    if seat is None:
        raise UnknownDrafter("Unknown drafter.")
    return seat


def init_draft(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Start a fresh draft; any existing state is discarded."""
    return DraftInitializer().create_draft(
        total_rounds=payload.get("totalRounds"),
        celebrity_list=payload.get("celebrityList"),
    )


def apply_pick(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Record a pick for the drafter on the clock and advance the turn."""
    new_state = _require_state(state)

    drafter_id = _text(payload, "drafterId")
    drafter_name = _text(payload, "drafterName")
    celebrity_name = _text(payload, "celebrityName")

    if not celebrity_name:
        raise InvalidInput("Celebrity name is required.")
    if not new_state.drafters:
        raise InvalidInput("No drafters have been configured.")

    seat = _resolve_seat(new_state, drafter_id, drafter_name)

    current = on_the_clock(new_state)
    if current is None or current.id != seat.id:
        raise NotYourTurn(f"It is not {seat.name}'s turn.")

    if new_state.is_celebrity_drafted(celebrity_name):
        raise AlreadyDrafted(f"{celebrity_name} has already been drafted.")

    celeb = _ensure_celebrity(new_state, celebrity_name)
    celeb.drafted_by_id = seat.id

    pick = Pick.create(
        overall_number=len(new_state.picks) + 1,
        round=new_state.current_round,
        drafter=seat,
        celebrity_name=celebrity_name,
    )
    new_state.picks.append(pick)

    next_index = new_state.current_pick_index + 1
    complete = next_index >= new_state.total_slots
    new_state.current_pick_index = next_index
    if complete:
        new_state.status = DraftStatus.COMPLETE
    else:
        new_state.status = DraftStatus.IN_PROGRESS
        new_state.current_round = round_for_index(next_index, len(new_state.drafters))
    new_state.updated_at = pick.created_at

    logger.info(
        "Pick %d (Rd %d): %s selects %s",
        pick.overall_number,
        pick.round,
        seat.name,
        celebrity_name,
    )
    return new_state


def apply_edit_pick(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Correct the celebrity on an existing pick without touching turn order."""
    new_state = _require_state(state)

    pick_id = _text(payload, "pickId")
    new_name = _text(payload, "newCelebrityName")
    if not pick_id or not new_name:
        raise InvalidInput("Both pickId and newCelebrityName are required.")

    pick = new_state.find_pick(pick_id)
    if pick is None:
        raise NotFound(f"Pick {pick_id} not found.")

    old_name = pick.celebrity_name
    if old_name.lower() == new_name.lower():
        return state

    if any(
        p.id != pick.id and p.celebrity_name.lower() == new_name.lower()
        for p in new_state.picks
    ):
        raise DuplicateName(f"Another pick already has {new_name}.")

    target = _ensure_celebrity(new_state, new_name)
    pick.celebrity_name = new_name

    if not new_state.is_celebrity_drafted(old_name):
        old_celeb = new_state.find_celebrity(old_name)
        if old_celeb is not None:
            old_celeb.drafted_by_id = None
    target.drafted_by_id = pick.drafter_id

    new_state.updated_at = utc_now()
    logger.info("Pick %d corrected: %s -> %s", pick.overall_number, old_name, new_name)
    return new_state


def apply_reset(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Clear every pick, keeping roster and celebrity pool."""
    new_state = _require_state(state)

    new_state.picks = []
    for celeb in new_state.celebrities:
        celeb.drafted_by_id = None
    new_state.current_pick_index = 0
    new_state.current_round = 1
    new_state.status = DraftStatus.NOT_STARTED
    new_state.updated_at = utc_now()

    logger.info("Draft reset")
    return new_state


def apply_undo(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Remove the most recent pick (rollback)."""
    new_state = _require_state(state)
    if not new_state.picks:
        return state

    last = new_state.picks.pop()
    for celeb in new_state.celebrities:
        if (
            celeb.drafted_by_id == last.drafter_id
            and celeb.name.lower() == last.celebrity_name.lower()
        ):
            celeb.drafted_by_id = None

    new_state.current_pick_index -= 1
    new_state.current_round = last.round
    new_state.status = (
        DraftStatus.IN_PROGRESS if new_state.picks else DraftStatus.NOT_STARTED
    )
    new_state.updated_at = utc_now()

    logger.info(
        "Undid pick %d (%s: %s)", last.overall_number, last.drafter_name,
        last.celebrity_name,
    )
    return new_state


def apply_validation(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Merge a name-normalization result onto the matching celebrity.

    An unknown celebrity is not an error: the board may have been reset
    between the pick and the validation result arriving.
    """
    new_state = _require_state(state)

    celebrity_name = _text(payload, "celebrityName")
    if not celebrity_name:
        raise InvalidInput("Celebrity name is required for validation.")
    validation = payload.get("validation") or {}
    if not isinstance(validation, Mapping):
        raise InvalidInput("Validation result must be an object.")

    target = new_state.find_celebrity(celebrity_name)
    if target is None:
        logger.debug("Ignoring validation for unknown celebrity %s", celebrity_name)
        return state

    target.full_name = validation.get("fullName") or target.full_name or target.name
    target.date_of_birth = validation.get("dateOfBirth") or target.date_of_birth
    if "wikipediaUrl" in validation:
        target.wikipedia_url = validation["wikipediaUrl"]
    if validation.get("hasWikipediaPage") is not None:
        target.has_wikipedia_page = validation["hasWikipediaPage"]
    target.is_validated = validation.get("isValid")
    target.validation_attempted = True
    if isinstance(validation.get("isDeceased"), bool):
        target.is_deceased = validation["isDeceased"]
    notes = validation.get("notes")
    target.validation_notes = notes if notes is not None else target.validation_notes

    new_state.updated_at = utc_now()
    return new_state


def apply_replace(state: Optional[DraftState], payload: Mapping) -> DraftState:
    """Accept a previously valid state wholesale (checkpoint or history restore)."""
    candidate = payload.get("state")
    if isinstance(candidate, DraftState):
        new_state = copy.deepcopy(candidate)
    elif isinstance(candidate, Mapping):
        try:
            new_state = DraftState.from_dict(candidate)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise InvalidInput(f"Invalid state payload for replace action: {e}") from e
    else:
        raise InvalidInput("Invalid state payload for replace action.")

    try:
        new_state.validate()
    except ValueError as e:
        raise InvalidInput(f"Inconsistent state for replace action: {e}") from e

    new_state.updated_at = utc_now()
    logger.info(
        "Draft replaced (pick index %d, %d picks)",
        new_state.current_pick_index,
        len(new_state.picks),
    )
    return new_state


ACTION_HANDLERS: Dict[str, ActionHandler] = {
    "init": init_draft,
    "pick": apply_pick,
    "editPick": apply_edit_pick,
    "reset": apply_reset,
    "undo": apply_undo,
    "applyValidation": apply_validation,
    "replace": apply_replace,
}


def get_handler(action: str) -> ActionHandler:
    """Look up the transition for an action name."""
    try:
        return ACTION_HANDLERS[action]
    except KeyError:
        raise InvalidInput(f'Unsupported action "{action}".') from None
