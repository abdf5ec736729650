"""Tests for the background validation worker."""

import threading

from src.draft_manager.draft_rules import InvalidInput, StaleWrite
from src.validation.validation_cache import ValidationCache
from src.validation.validation_worker import ValidationJob, ValidationWorker


# ── Helpers ──────────────────────────────────────────────────────────

def _make_worker(store, lookup, apply_validation=None, max_attempts=3):
    sleeps = []
    worker = ValidationWorker(
        ValidationCache(store, lookup),
        apply_validation=apply_validation,
        max_attempts=max_attempts,
        backoff_seconds=0.5,
        sleep=sleeps.append,
    )
    return worker, sleeps


class _Recorder:
    """apply_validation callback that can fail a fixed number of times."""

    def __init__(self, failures=0, error=StaleWrite):
        self.failures = failures
        self.error = error
        self.applied = []

    def __call__(self, name, result):
        if self.failures:
            self.failures -= 1
            raise self.error("lost the race")
        self.applied.append((name, result))


# ── Processing ───────────────────────────────────────────────────────

class TestProcess:
    def test_applies_result(self, store, fake_lookup):
        recorder = _Recorder()
        worker, sleeps = _make_worker(store, fake_lookup, recorder)

        assert worker.process(ValidationJob("Taylor Swift")) is True
        name, result = recorder.applied[0]
        assert name == "Taylor Swift"
        assert result["fullName"] == "Taylor Alison Swift"
        assert sleeps == []

    def test_retries_lookup_failures_with_backoff(self, store, make_lookup, wiki):
        lookup = make_lookup(answers={"zendaya": [None, None, wiki("Zendaya Coleman")]})
        recorder = _Recorder()
        worker, sleeps = _make_worker(store, lookup, recorder)

        assert worker.process(ValidationJob("Zendaya")) is True
        assert len(lookup.calls) == 3
        assert sleeps == [0.5, 1.0]
        assert recorder.applied[0][1]["fullName"] == "Zendaya Coleman"

    def test_last_attempt_applies_unvalidated_result(self, store, make_lookup):
        recorder = _Recorder()
        worker, sleeps = _make_worker(store, make_lookup(), recorder, max_attempts=2)

        assert worker.process(ValidationJob("Nobody")) is True
        assert recorder.applied[0][1]["isValid"] is False
        assert sleeps == [0.5]

    def test_unconfigured_lookup_is_not_retried(self, store, make_lookup):
        lookup = make_lookup(is_configured=False)
        recorder = _Recorder()
        worker, sleeps = _make_worker(store, lookup, recorder)

        assert worker.process(ValidationJob("Zendaya")) is True
        assert lookup.calls == ["Zendaya"]
        assert sleeps == []
        assert recorder.applied[0][1]["lookupError"] == "Lookup API key not configured."

    def test_retries_stale_writes(self, store, fake_lookup):
        recorder = _Recorder(failures=2)
        worker, sleeps = _make_worker(store, fake_lookup, recorder)

        assert worker.process(ValidationJob("The Rock")) is True
        assert len(recorder.applied) == 1
        assert sleeps == [0.5, 1.0]

    def test_gives_up_after_max_attempts(self, store, fake_lookup):
        recorder = _Recorder(failures=5)
        worker, _ = _make_worker(store, fake_lookup, recorder)

        assert worker.process(ValidationJob("The Rock")) is False
        assert recorder.applied == []

    def test_rejected_result_not_retried(self, store, fake_lookup):
        recorder = _Recorder(failures=1, error=InvalidInput)
        worker, sleeps = _make_worker(store, fake_lookup, recorder)

        assert worker.process(ValidationJob("The Rock")) is False
        assert sleeps == []


# ── Queue ────────────────────────────────────────────────────────────

class TestQueue:
    def test_drain_processes_everything(self, store, fake_lookup):
        recorder = _Recorder()
        worker, _ = _make_worker(store, fake_lookup, recorder)
        worker.submit("Taylor Swift")
        worker.submit("  ")
        worker.submit("The Rock")

        assert worker.pending == 2
        assert worker.drain() == 2
        assert [name for name, _ in recorder.applied] == ["Taylor Swift", "The Rock"]

    def test_background_thread(self, store, fake_lookup):
        done = threading.Event()

        def apply_validation(name, result):
            done.set()

        worker, _ = _make_worker(store, fake_lookup, apply_validation)
        worker.start()
        try:
            worker.submit("Taylor Swift")
            assert done.wait(timeout=5)
        finally:
            worker.stop()
