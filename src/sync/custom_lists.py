"""Per-drafter custom auto-draft lists.

Each drafter can keep an ordered wish list of validated celebrities. The
lists share the room's key-value store with a read-modify-write pattern
and no atomicity guarantee.
"""

import logging
import secrets
from typing import Dict, List, Mapping, Optional, Tuple

from src.draft_manager.config import CUSTOM_LISTS_KEY
from src.draft_manager.draft_rules import InvalidInput, NotFound
from src.draft_manager.draft_state import Celebrity, utc_now
from src.draft_manager.state_persistence import BlobStore

logger = logging.getLogger(__name__)


def _text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def celebrity_from_validation(name: str, validation: Mapping) -> Celebrity:
    """Build a list entry from a validation result."""
    clean_name = _text(name)
    is_deceased = validation.get("isDeceased")
    return Celebrity(
        id=f"c-{secrets.token_hex(6)}",
        name=clean_name,
        full_name=_text(validation.get("fullName")) or clean_name,
        date_of_birth=_text(validation.get("dateOfBirth")) or None,
        wikipedia_url=_text(validation.get("wikipediaUrl")) or None,
        has_wikipedia_page=bool(validation.get("hasWikipediaPage")),
        is_validated=bool(validation.get("isValid")),
        validation_attempted=True,
        is_deceased=is_deceased if isinstance(is_deceased, bool) else None,
        validation_notes=_text(validation.get("notes")) or None,
    )


class CustomListManager:
    """CRUD and reordering for drafter wish lists."""

    def __init__(self, store: BlobStore):
        self.store = store

    def list_all(self) -> Dict[str, Dict]:
        document = self.store.get(CUSTOM_LISTS_KEY) or {}
        lists = document.get("lists")
        return lists if isinstance(lists, dict) else {}

    def _save_all(self, lists: Dict[str, Dict]) -> None:
        self.store.set(CUSTOM_LISTS_KEY, {"lists": lists})

    def add(
        self, drafter_id: str, drafter_name: str, name: str, validation: Mapping
    ) -> Tuple[Dict, bool]:
        """
        Append a validated celebrity to a drafter's list.

        Returns:
            (updated_list, added) - added is False when already present
        """
        drafter_id, drafter_name, name = _text(drafter_id), _text(drafter_name), _text(name)
        if not drafter_id or not drafter_name or not name:
            raise InvalidInput("drafterId, drafterName and name are required.")
        if not isinstance(validation, Mapping):
            raise InvalidInput("Missing or invalid validation result.")

        lists = self.list_all()
        existing = lists.get(drafter_id) or {
            "drafterId": drafter_id,
            "drafterName": drafter_name,
            "celebrities": [],
        }
        celebrities: List[Dict] = list(existing.get("celebrities") or [])

        wanted = (_text(validation.get("fullName")) or name).lower()
        already = any(
            (c.get("fullName") or c.get("name") or "").lower() == wanted
            for c in celebrities
        )
        if not already:
            celebrities.append(celebrity_from_validation(name, validation).to_dict())

        updated = {
            **existing,
            "drafterId": drafter_id,
            "drafterName": existing.get("drafterName") or drafter_name,
            "celebrities": celebrities,
            "updatedAt": utc_now(),
        }
        lists[drafter_id] = updated
        self._save_all(lists)

        logger.info(
            "%s %s on %s's list", "Added" if not already else "Kept", name, drafter_name
        )
        return updated, not already

    def remove(self, drafter_id: str, celebrity_id: str) -> Optional[Dict]:
        """Drop one entry; a missing list is left alone."""
        drafter_id, celebrity_id = _text(drafter_id), _text(celebrity_id)
        if not drafter_id or not celebrity_id:
            raise InvalidInput("drafterId and celebrityId are required.")

        lists = self.list_all()
        existing = lists.get(drafter_id)
        if not existing or not isinstance(existing.get("celebrities"), list):
            return existing

        updated = {
            **existing,
            "celebrities": [
                c for c in existing["celebrities"] if c.get("id") != celebrity_id
            ],
            "updatedAt": utc_now(),
        }
        lists[drafter_id] = updated
        self._save_all(lists)
        return updated

    def reorder(self, drafter_id: str, order: List[str]) -> Dict:
        """
        Reorder a list by celebrity id.

        Ids named in *order* come first; entries not mentioned keep their
        relative order at the end. Unknown ids are ignored.
        """
        drafter_id = _text(drafter_id)
        if not drafter_id or not isinstance(order, list) or not order:
            raise InvalidInput("drafterId and a non-empty order are required.")

        lists = self.list_all()
        existing = lists.get(drafter_id)
        if not existing or not isinstance(existing.get("celebrities"), list):
            raise NotFound("Custom list not found for specified drafterId.")

        by_id = {c["id"]: c for c in existing["celebrities"] if isinstance(c.get("id"), str)}
        reordered = []
        for celeb_id in order:
            celeb = by_id.pop(celeb_id, None) if isinstance(celeb_id, str) else None
            if celeb is not None:
                reordered.append(celeb)
        for celeb in existing["celebrities"]:
            if by_id.pop(celeb.get("id"), None) is not None:
                reordered.append(celeb)

        updated = {**existing, "celebrities": reordered, "updatedAt": utc_now()}
        lists[drafter_id] = updated
        self._save_all(lists)
        return updated
