"""State persistence - durable key-value slots for draft documents.

Every document (live draft, checkpoint list, custom lists, validation
cache entries) is a JSON object stored under a string key. Writes can be
guarded by a compare-and-set on the document's ``version`` field so a
writer that read a stale copy is rejected instead of overwriting.
"""

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import quote

from src.draft_manager.config import STORE_DIR

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the durable slot cannot be read or written."""


class VersionConflict(StoreError):
    """Raised when a compare-and-set write loses against a newer version."""

    def __init__(self, key: str, expected: int, actual: int):
        super().__init__(
            f"Version conflict on {key}: expected {expected}, found {actual}"
        )
        self.key = key
        self.expected = expected
        self.actual = actual


def _version_of(document: Optional[Dict]) -> int:
    if not document:
        return 0
    return int(document.get("version", 0))


class BlobStore:
    """Base class for key -> JSON document storage."""

    def __init__(self):
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Dict]:
        """Load a document, or None when the key is absent."""
        raise NotImplementedError

    def _write(self, key: str, document: Dict) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def set(self, key: str, document: Dict) -> None:
        """Unconditional write (last write wins)."""
        with self._lock:
            self._write(key, document)

    def compare_and_set(
        self, key: str, expected_version: int, document: Dict
    ) -> None:
        """Write *document* only if the stored version equals *expected_version*.

        An absent key counts as version 0.

        Raises:
            VersionConflict: If another writer got there first.
        """
        with self._lock:
            actual = _version_of(self.get(key))
            if actual != expected_version:
                raise VersionConflict(key, expected_version, actual)
            self._write(key, document)


class InMemoryBlobStore(BlobStore):
    """Process-local store used by tests and single-process demos."""

    def __init__(self):
        super().__init__()
        self._documents: Dict[str, Dict] = {}

    def get(self, key: str) -> Optional[Dict]:
        document = self._documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    def _write(self, key: str, document: Dict) -> None:
        self._documents[key] = copy.deepcopy(document)

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._documents.pop(key, None) is not None


class JsonFileBlobStore(BlobStore):
    """Handles saving and loading documents to/from JSON files."""

    def __init__(self, storage_dir: Optional[Path] = None):
        super().__init__()
        self.storage_dir = Path(storage_dir or STORE_DIR)
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        return self.storage_dir / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> Optional[Dict]:
        filepath = self._path_for(key)
        if not filepath.exists():
            return None

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Corrupt document {filepath}: {e}") from e
        except OSError as e:
            raise StoreError(f"Failed to read {filepath}: {e}") from e

        if not isinstance(document, dict):
            raise StoreError(f"Document {filepath} is not a JSON object")
        return document

    def _write(self, key: str, document: Dict) -> None:
        filepath = self._path_for(key)
        temp_file = filepath.with_suffix(".tmp")

        # Atomic write: temp file + rename
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            temp_file.replace(filepath)
        except (OSError, TypeError, ValueError) as e:
            raise StoreError(f"Failed to write {filepath}: {e}") from e

        logger.debug("Wrote %s (version %d)", filepath.name, _version_of(document))

    def delete(self, key: str) -> bool:
        filepath = self._path_for(key)
        with self._lock:
            if not filepath.exists():
                return False
            filepath.unlink()
        logger.info("Deleted %s", filepath.name)
        return True
