"""
Background validation of drafted celebrities.

Picks are committed and broadcast first; validation runs afterwards on a
worker thread and lands as a separate ``applyValidation`` transition.
Jobs retry with exponential backoff when the lookup fails or the write
loses a race, and give up quietly after the last attempt.
"""

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from src.draft_manager.draft_rules import DraftActionError, StaleWrite
from src.draft_manager.state_persistence import StoreError
from src.validation.config import VALIDATION_BACKOFF_SECONDS, VALIDATION_MAX_ATTEMPTS
from src.validation.validation_cache import ValidationCache

logger = logging.getLogger(__name__)

# (celebrity_name, validation_result) -> anything
ApplyValidation = Callable[[str, Dict], Any]


@dataclass
class ValidationJob:
    celebrity_name: str
    force: bool = False


class ValidationWorker:
    """Queue of validation jobs decoupled from the pick request path."""

    def __init__(
        self,
        cache: ValidationCache,
        apply_validation: Optional[ApplyValidation] = None,
        max_attempts: int = VALIDATION_MAX_ATTEMPTS,
        backoff_seconds: float = VALIDATION_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.cache = cache
        self.apply_validation = apply_validation
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._queue: "queue.Queue[Optional[ValidationJob]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def submit(self, celebrity_name: str, force: bool = False) -> None:
        """Queue a name for validation; returns immediately."""
        if not celebrity_name or not celebrity_name.strip():
            return
        self._queue.put(ValidationJob(celebrity_name.strip(), force))
        logger.debug("Queued validation for %s", celebrity_name)

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(
            target=self._run, name="validation-worker", daemon=True
        )
        self._thread.start()
        logger.info("Validation worker started")

    def stop(self, timeout: float = 5.0) -> None:
        if not self._thread:
            return
        self._queue.put(None)
        self._thread.join(timeout)
        self._thread = None
        logger.info("Validation worker stopped")

    def drain(self) -> int:
        """Process every queued job on the calling thread.

        Returns:
            Number of jobs processed
        """
        processed = 0
        while True:
            try:
                job = self._queue.get_nowait()
            except queue.Empty:
                return processed
            if job is not None:
                self.process(job)
                processed += 1

    def _run(self) -> None:
        while True:
            job = self._queue.get()
            if job is None:
                return
            try:
                self.process(job)
            except Exception:
                logger.exception("Validation job for %s crashed", job.celebrity_name)

    def process(self, job: ValidationJob) -> bool:
        """Validate one name and apply the result, retrying transient failures.

        Returns:
            True if a result was applied
        """
        # An unconfigured lookup fails the same way on every attempt
        retryable = getattr(self.cache.lookup, "is_configured", True)
        for attempt in range(1, self.max_attempts + 1):
            last_attempt = attempt == self.max_attempts
            try:
                result = self.cache.validate(job.celebrity_name, force=job.force)
                if result.get("lookupError") and retryable and not last_attempt:
                    logger.warning(
                        "Lookup failed for %s (attempt %d/%d): %s",
                        job.celebrity_name,
                        attempt,
                        self.max_attempts,
                        result["lookupError"],
                    )
                    self._backoff(attempt)
                    continue

                if self.apply_validation is not None:
                    self.apply_validation(job.celebrity_name, result)
                return True

            except (StaleWrite, StoreError) as e:
                logger.warning(
                    "Applying validation for %s failed (attempt %d/%d): %s",
                    job.celebrity_name,
                    attempt,
                    self.max_attempts,
                    e,
                )
                if last_attempt:
                    break
                self._backoff(attempt)

            except DraftActionError as e:
                logger.warning(
                    "Validation for %s rejected: %s", job.celebrity_name, e
                )
                return False

        logger.error(
            "Giving up on validation for %s after %d attempts",
            job.celebrity_name,
            self.max_attempts,
        )
        return False

    def _backoff(self, attempt: int) -> None:
        self._sleep(self.backoff_seconds * (2 ** (attempt - 1)))
