"""Tests for the HTTP/WebSocket surface."""

import pytest
from fastapi.testclient import TestClient

from src.draft_manager.state_persistence import InMemoryBlobStore, StoreError
from src.sync.api_server import create_app


# ── Helpers ──────────────────────────────────────────────────────────

class _UnreachableStore(InMemoryBlobStore):
    def get(self, key):
        raise StoreError("slot unreachable")


@pytest.fixture
def app(store, fake_lookup):
    return create_app(store=store, lookup=fake_lookup, start_worker=False)


@pytest.fixture
def client(app):
    return TestClient(app)


def _init(client, rounds=2, names=("Taylor Swift", "Drake")):
    response = client.post(
        "/draft",
        json={"action": "init", "totalRounds": rounds, "celebrityList": list(names), "isAdmin": True},
    )
    assert response.status_code == 200
    return response.json()["state"]


def _pick(client, drafter_name, celebrity_name, **extra):
    return client.post(
        "/draft",
        json={"action": "pick", "drafterName": drafter_name, "celebrityName": celebrity_name, **extra},
    )


# ── Draft ────────────────────────────────────────────────────────────

class TestDraftEndpoints:
    def test_get_before_init_is_404(self, client):
        response = client.get("/draft")
        assert response.status_code == 404
        assert response.json()["reason"] == "NotInitialized"

    def test_init_requires_admin(self, client):
        response = client.post("/draft", json={"action": "init"})
        assert response.status_code == 403
        assert response.json()["reason"] == "Forbidden"

    def test_init_and_read(self, client):
        state = _init(client)
        assert state["status"] == "not-started"
        assert state["config"]["totalRounds"] == 2

        body = client.get("/draft").json()
        assert body["success"] is True
        assert [c["name"] for c in body["state"]["celebrities"]] == ["Taylor Swift", "Drake"]

    def test_read_includes_snake_order(self, client):
        state = _init(client, rounds=2)
        seats = len(state["drafters"])
        order = client.get("/draft").json()["order"]

        assert len(order) == 2 * seats
        assert order[0] == "drafter-josh"
        assert order[seats - 1] == order[seats]
        assert order[seats:] == list(reversed(order[:seats]))

    def test_pick(self, client):
        _init(client)
        body = _pick(client, "Josh", "Taylor Swift").json()
        assert body["success"] is True
        assert body["changed"] is True
        assert body["state"]["currentPickIndex"] == 1
        assert body["state"]["picks"][0]["drafterId"] == "drafter-josh"

    def test_rule_violation_is_400(self, client):
        _init(client)
        response = _pick(client, "Jim", "Drake")
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "reason": "NotYourTurn",
            "error": "It is not Jim's turn.",
        }

    def test_unsupported_action(self, client):
        _init(client)
        response = client.post("/draft", json={"action": "trade"})
        assert response.status_code == 400
        assert response.json()["reason"] == "InvalidInput"

    def test_stale_expected_version_is_409(self, client):
        version = _init(client)["version"]
        assert _pick(client, "Josh", "Drake", expectedVersion=version).status_code == 200

        response = _pick(client, "Jim", "Zendaya", expectedVersion=version)
        assert response.status_code == 409
        assert response.json()["reason"] == "StaleWrite"

    def test_rollback(self, client):
        _init(client)
        _pick(client, "Josh", "Drake")
        response = client.post("/draft", json={"action": "rollback", "isAdmin": True})
        assert response.status_code == 200
        assert response.json()["state"]["picks"] == []

    def test_rollback_with_empty_history_is_404(self, client):
        response = client.post("/draft", json={"action": "rollback", "isAdmin": True})
        assert response.status_code == 404

    def test_pick_is_validated_in_background(self, app, client):
        _init(client)
        _pick(client, "Josh", "Taylor Swift")
        assert app.state.worker.drain() == 1

        celeb = client.get("/draft").json()["state"]["celebrities"][0]
        assert celeb["fullName"] == "Taylor Alison Swift"
        assert celeb["isValidated"] is True
        assert celeb["validationAttempted"] is True

    def test_replace_with_malformed_entries_is_400(self, client):
        document = _init(client)
        document["celebrities"] = ["Drake"]
        response = client.post(
            "/draft", json={"action": "replace", "state": document, "isAdmin": True}
        )
        assert response.status_code == 400
        assert response.json()["reason"] == "InvalidInput"
        assert client.get("/draft").json()["state"]["celebrities"][1]["name"] == "Drake"

    def test_store_failure_is_503(self, fake_lookup):
        client = TestClient(
            create_app(store=_UnreachableStore(), lookup=fake_lookup, start_worker=False)
        )
        response = client.get("/draft")
        assert response.status_code == 503
        assert response.json()["reason"] == "StoreError"


# ── Checkpoints ──────────────────────────────────────────────────────

class TestCheckpointEndpoints:
    def test_save_list_load_restore(self, client):
        _init(client)
        _pick(client, "Josh", "Drake")

        saved = client.post(
            "/checkpoints", json={"action": "save", "name": "after pick 1", "isAdmin": True}
        ).json()
        assert saved["saved"]["name"] == "after pick 1"
        checkpoint_id = saved["saved"]["id"]

        listed = client.post("/checkpoints", json={"action": "list"}).json()
        assert [cp["id"] for cp in listed["checkpoints"]] == [checkpoint_id]

        loaded = client.post("/checkpoints", json={"action": "load", "id": checkpoint_id}).json()
        assert len(loaded["checkpoint"]["state"]["picks"]) == 1

        client.post("/draft", json={"action": "reset", "isAdmin": True})
        restored = client.post(
            "/checkpoints", json={"action": "restore", "id": checkpoint_id, "isAdmin": True}
        ).json()
        assert restored["state"]["picks"][0]["celebrityName"] == "Drake"

    def test_save_with_malformed_state_is_400(self, client):
        document = _init(client)
        document["picks"] = ["Drake"]
        response = client.post(
            "/checkpoints",
            json={"action": "save", "name": "bad", "state": document, "isAdmin": True},
        )
        assert response.status_code == 400
        assert response.json()["reason"] == "InvalidInput"

    def test_save_requires_admin(self, client):
        _init(client)
        response = client.post("/checkpoints", json={"action": "save", "name": "x"})
        assert response.status_code == 403

    def test_unknown_checkpoint_is_404(self, client):
        response = client.post("/checkpoints", json={"action": "load", "id": "cp-nope"})
        assert response.status_code == 404
        assert response.json()["error"] == "Checkpoint not found."

    def test_unsupported_action(self, client):
        assert client.post("/checkpoints", json={"action": "purge"}).status_code == 400


# ── Validation & custom lists ────────────────────────────────────────

class TestValidationEndpoint:
    def test_validate(self, client, fake_lookup):
        body = client.post("/validate-celebrity", json={"name": "The Rock"}).json()
        assert body["result"]["fullName"] == "Dwayne Johnson"

        client.post("/validate-celebrity", json={"name": "the rock"})
        assert fake_lookup.calls == ["The Rock"]

    def test_blank_name(self, client):
        assert client.post("/validate-celebrity", json={"name": ""}).status_code == 400


class TestCustomListEndpoint:
    def test_add_looks_up_missing_validation(self, client):
        body = client.post(
            "/custom-auto-lists",
            json={"action": "add", "drafterId": "drafter-pat", "drafterName": "Pat", "name": "Taylor Swift"},
        ).json()
        assert body["added"] is True
        assert body["list"]["celebrities"][0]["fullName"] == "Taylor Alison Swift"

    def test_add_rejects_invalid_names(self, client):
        response = client.post(
            "/custom-auto-lists",
            json={"action": "add", "drafterId": "drafter-pat", "drafterName": "Pat", "name": "Nobody Known"},
        )
        assert response.status_code == 400

    def test_list_and_reorder(self, client):
        for name in ("Taylor Swift", "The Rock"):
            client.post(
                "/custom-auto-lists",
                json={"action": "add", "drafterId": "drafter-pat", "drafterName": "Pat", "name": name},
            )
        lists = client.post("/custom-auto-lists", json={"action": "list"}).json()["listsByDrafter"]
        ids = [c["id"] for c in lists["drafter-pat"]["celebrities"]]

        body = client.post(
            "/custom-auto-lists",
            json={"action": "reorder", "drafterId": "drafter-pat", "order": list(reversed(ids))},
        ).json()
        assert [c["name"] for c in body["list"]["celebrities"]] == ["The Rock", "Taylor Swift"]

    def test_reorder_missing_list_is_404(self, client):
        response = client.post(
            "/custom-auto-lists", json={"action": "reorder", "drafterId": "nobody", "order": ["c-1"]}
        )
        assert response.status_code == 404


# ── Health & WebSocket ───────────────────────────────────────────────

class TestHealthAndSocket:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body["status"] == "healthy"
        assert body["lookupConfigured"] is True

    def test_socket_receives_change_notifications(self, client):
        _init(client)
        with client.websocket_connect("/ws") as websocket:
            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

            body = _pick(client, "Josh", "Drake").json()
            message = websocket.receive_json()

        assert message["type"] == "state:updated"
        assert message["payload"]["updatedAt"] == body["state"]["updatedAt"]
        assert body["notified"] is True
