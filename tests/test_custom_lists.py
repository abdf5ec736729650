"""Tests for per-drafter custom auto-draft lists."""

import pytest

from src.draft_manager.draft_rules import InvalidInput, NotFound
from src.sync.custom_lists import CustomListManager


# ── Helpers ──────────────────────────────────────────────────────────

def _validation(full_name, valid=True):
    return {
        "fullName": full_name,
        "dateOfBirth": "1990-01-01",
        "wikipediaUrl": f"https://en.wikipedia.org/wiki/{full_name.replace(' ', '_')}",
        "hasWikipediaPage": True,
        "isValid": valid,
        "isDeceased": False,
        "notes": None,
    }


def _make_list(manager, drafter_id, *names):
    for name in names:
        manager.add(drafter_id, drafter_id.title(), name, _validation(name))
    return manager.list_all()[drafter_id]


@pytest.fixture
def manager(store):
    return CustomListManager(store)


# ── add ──────────────────────────────────────────────────────────────

class TestAdd:
    def test_creates_list(self, manager):
        updated, added = manager.add("x", "X", "Zendaya", _validation("Zendaya Coleman"))
        assert added is True
        assert updated["drafterName"] == "X"
        entry = updated["celebrities"][0]
        assert entry["name"] == "Zendaya"
        assert entry["fullName"] == "Zendaya Coleman"
        assert entry["isValidated"] is True
        assert entry["id"].startswith("c-")

    def test_dedupes_by_full_name(self, manager):
        manager.add("x", "X", "The Rock", _validation("Dwayne Johnson"))
        _, added = manager.add("x", "X", "dwayne johnson", _validation("DWAYNE JOHNSON"))
        assert added is False
        assert len(manager.list_all()["x"]["celebrities"]) == 1

    def test_lists_are_per_drafter(self, manager):
        _make_list(manager, "x", "Drake")
        _make_list(manager, "y", "Drake")
        assert set(manager.list_all()) == {"x", "y"}

    def test_missing_fields(self, manager):
        with pytest.raises(InvalidInput):
            manager.add("x", "", "Drake", _validation("Drake"))
        with pytest.raises(InvalidInput):
            manager.add("x", "X", "Drake", None)


# ── remove ───────────────────────────────────────────────────────────

class TestRemove:
    def test_removes_entry(self, manager):
        entries = _make_list(manager, "x", "A", "B")["celebrities"]
        updated = manager.remove("x", entries[0]["id"])
        assert [c["name"] for c in updated["celebrities"]] == ["B"]

    def test_missing_list_is_noop(self, manager):
        assert manager.remove("nobody", "c-1") is None
        assert manager.list_all() == {}


# ── reorder ──────────────────────────────────────────────────────────

class TestReorder:
    def test_named_ids_first_rest_appended(self, manager):
        entries = _make_list(manager, "x", "A", "B", "C", "D")["celebrities"]
        ids = [c["id"] for c in entries]

        updated = manager.reorder("x", [ids[2], "unknown", ids[0]])
        assert [c["name"] for c in updated["celebrities"]] == ["C", "A", "B", "D"]

    def test_missing_list(self, manager):
        with pytest.raises(NotFound):
            manager.reorder("nobody", ["c-1"])

    def test_empty_order(self, manager):
        _make_list(manager, "x", "A")
        with pytest.raises(InvalidInput):
            manager.reorder("x", [])
