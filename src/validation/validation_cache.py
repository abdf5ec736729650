"""
Validation cache in front of the celebrity lookup.

Results that resolved to a Wikipedia page are cached per name so repeat
validations (re-picks after an undo, edits back and forth) skip the
external call. A forced refresh bypasses and overwrites the entry.
"""

import logging
from typing import Dict, Optional
from urllib.parse import quote

from src.draft_manager.config import VALIDATION_KEY_PREFIX
from src.draft_manager.draft_rules import InvalidInput
from src.draft_manager.draft_state import utc_now
from src.draft_manager.state_persistence import BlobStore, StoreError

logger = logging.getLogger(__name__)


def cache_key(name: str) -> Optional[str]:
    """Store key for a name, or None for blank input."""
    if not isinstance(name, str):
        return None
    normalized = name.strip().lower()
    if not normalized:
        return None
    return f"{VALIDATION_KEY_PREFIX}name-{quote(normalized, safe='')}"


def _has_reference(result: Optional[Dict]) -> bool:
    return bool(result and result.get("hasWikipediaPage") and result.get("wikipediaUrl"))


def build_result(name: str, found: Optional[Dict], lookup_error: Optional[str]) -> Dict:
    """Turn a raw lookup answer (or its absence) into a validation result."""
    found = found or {}
    date_of_birth = found.get("dateOfBirth") or ""
    wikipedia_url = found.get("wikipediaUrl") or None
    has_page = bool(wikipedia_url)

    return {
        "inputName": name,
        "fullName": found.get("fullName") or name,
        "dateOfBirth": date_of_birth,
        "hasWikipediaPage": has_page,
        "wikipediaUrl": wikipedia_url,
        "isValid": bool(has_page or date_of_birth),
        "notes": found.get("notes") or None,
        "isDeceased": bool(found.get("isDeceased")),
        "usedLookup": bool(found),
        "lookupError": lookup_error,
    }


class ValidationCache:
    """Name-keyed cache of successful validation results."""

    def __init__(self, store: BlobStore, lookup):
        self.store = store
        self.lookup = lookup

    def read(self, name: str) -> Optional[Dict]:
        key = cache_key(name)
        if key is None:
            return None
        try:
            cached = self.store.get(key)
        except StoreError as e:
            logger.error("Validation cache: failed to read %s: %s", key, e)
            return None
        if not cached or not isinstance(cached.get("result"), dict):
            return None
        return cached["result"]

    def write(self, name: str, result: Dict) -> None:
        """Best-effort write; failures are logged, never raised."""
        key = cache_key(name)
        if key is None:
            return
        try:
            self.store.set(key, {"cachedAt": utc_now(), "result": result})
        except StoreError as e:
            logger.error("Validation cache: failed to write %s: %s", key, e)

    def validate(self, name: str, force: bool = False) -> Dict:
        """
        Validate a celebrity name, serving from cache when possible.

        Args:
            name: Celebrity name to validate
            force: Skip the cache and overwrite it with a fresh lookup

        Returns:
            Validation result dict

        Raises:
            InvalidInput: If name is blank
        """
        clean_name = name.strip() if isinstance(name, str) else ""
        if not clean_name:
            raise InvalidInput('Missing "name" for validation.')

        if not force:
            cached = self.read(clean_name)
            if _has_reference(cached):
                logger.debug("Validation cache hit for %s", clean_name)
                return cached

        found = self.lookup.lookup(clean_name)
        if found is not None:
            lookup_error = None
        elif getattr(self.lookup, "is_configured", True):
            lookup_error = "Lookup request failed or returned no result."
        else:
            lookup_error = "Lookup API key not configured."

        result = build_result(clean_name, found, lookup_error)
        if _has_reference(result):
            self.write(clean_name, result)

        logger.info(
            "Validated %s: valid=%s, wikipedia=%s",
            clean_name,
            result["isValid"],
            result["hasWikipediaPage"],
        )
        return result
