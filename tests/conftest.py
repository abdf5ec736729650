"""Shared fixtures for the draft room test suite."""

import pytest

from src.draft_manager.draft_initializer import DraftInitializer
from src.draft_manager.state_persistence import InMemoryBlobStore
from src.sync.broadcaster import NotificationChannel

# Three-seat room used by most scenarios: X picks first
XYZ_ROSTER = [
    {"id": "x", "name": "X", "order": 1},
    {"id": "y", "name": "Y", "order": 2},
    {"id": "z", "name": "Z", "order": 3},
]


class FakeLookup:
    """Stand-in for the external name lookup; records every call."""

    def __init__(self, answers=None, is_configured=True):
        self.answers = answers or {}
        self.is_configured = is_configured
        self.calls = []

    def lookup(self, name):
        self.calls.append(name)
        answer = self.answers.get(name.lower())
        if isinstance(answer, list):
            return answer.pop(0) if answer else None
        return answer


def wiki_answer(full_name, dob="1990-01-01", deceased=False):
    slug = full_name.replace(" ", "_")
    return {
        "fullName": full_name,
        "dateOfBirth": dob,
        "wikipediaUrl": f"https://en.wikipedia.org/wiki/{slug}",
        "isDeceased": deceased,
        "notes": "",
    }


# ------------------------------------------------------------------
# Lightweight factories – cheap to construct, no I/O
# ------------------------------------------------------------------

@pytest.fixture
def initializer():
    return DraftInitializer(roster=XYZ_ROSTER)


@pytest.fixture
def xyz_state(initializer):
    """Fresh two-round draft for X, Y, Z with A and B in the pool."""
    return initializer.create_draft(total_rounds=2, celebrity_list=["A", "B"])


@pytest.fixture
def store():
    return InMemoryBlobStore()


@pytest.fixture
def channel():
    return NotificationChannel("test-room")


@pytest.fixture
def fake_lookup():
    return FakeLookup(
        answers={
            "taylor swift": wiki_answer("Taylor Alison Swift", "1989-12-13"),
            "the rock": wiki_answer("Dwayne Johnson", "1972-05-02"),
        }
    )


@pytest.fixture
def make_lookup():
    """Factory for FakeLookup instances with custom answers."""
    return FakeLookup


@pytest.fixture
def wiki():
    return wiki_answer
