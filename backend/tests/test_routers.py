from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from noteclerk.app import create_app
from noteclerk.database.memory import InMemoryNoteStore, seed_notes
from noteclerk.errors import StoreError


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings, InMemoryNoteStore())) as test_client:
        yield test_client


def test_health(client) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "noteclerk", "version": "test"}


def test_create_note(client) -> None:
    response = client.post(
        "/api/notes",
        json={"note": {"visit_guid": "visit-9", "tags": ["triage"], "fragments": [{"content": "Chest pain"}]}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"]["http_code"] == 200
    assert body["note"]["id"] == 4
    assert body["note"]["tags"] == ["triage"]
    assert body["note"]["fragments"][0]["note_guid"] == body["note"]["note_guid"]


def test_create_note_with_id_is_bad_request(client) -> None:
    response = client.post("/api/notes", json={"note": {"id": 7}})
    assert response.status_code == 400
    assert len(client.get("/api/notes/search", params={"patient_guid": seed_notes()[0].patient_guid}).json()["notes"]) == 2


def test_retrieve_note(client) -> None:
    response = client.get("/api/notes/1")
    assert response.status_code == 200
    assert response.json()["note"]["note_guid"] == seed_notes()[0].note_guid


def test_retrieve_note_by_guid(client) -> None:
    guid = seed_notes()[2].note_guid
    response = client.get(f"/api/notes/guid/{guid}")
    assert response.status_code == 200
    assert response.json()["note"]["id"] == 3


def test_retrieve_unknown_note(client) -> None:
    response = client.get("/api/notes/-1")
    assert response.status_code == 404
    assert response.json()["note"] is None


def test_search_notes(client) -> None:
    seed = seed_notes()[0]
    response = client.get("/api/notes/search", params={"author_guid": seed.author_guid})
    assert response.status_code == 200
    assert [n["id"] for n in response.json()["notes"]] == [1, 2]


def test_search_without_criteria_is_bad_request(client) -> None:
    assert client.get("/api/notes/search").status_code == 400


def test_search_with_no_matches(client) -> None:
    response = client.get("/api/notes/search", params={"visit_guid": str(uuid4())})
    assert response.status_code == 404
    assert response.json()["notes"] == []


def test_update_note(client) -> None:
    note = client.get("/api/notes/2").json()["note"]
    note["tags"].append("reviewed")

    response = client.put("/api/notes/2", json=note)

    assert response.status_code == 200
    assert response.json()["note"]["tags"] == ["follow-up", "reviewed"]


def test_update_note_id_mismatch_is_conflict(client) -> None:
    note = client.get("/api/notes/2").json()["note"]
    response = client.put("/api/notes/3", json=note)
    assert response.status_code == 409
    assert client.get("/api/notes/3").json()["note"]["note_guid"] == seed_notes()[2].note_guid


def test_delete_unknown_note_is_not_modified(client) -> None:
    response = client.delete("/api/notes/-1")
    assert response.status_code == 304


def test_delete_note_by_guid(client) -> None:
    guid = seed_notes()[1].note_guid
    assert client.delete(f"/api/notes/guid/{guid}").status_code == 200
    assert client.get(f"/api/notes/guid/{guid}").status_code == 404


def test_delete_note_by_id(client) -> None:
    assert client.delete("/api/notes/3").status_code == 200
    assert client.get("/api/notes/3").status_code == 404


class _UnreachableStore(InMemoryNoteStore):
    async def get_note_by_id(self, note_id):
        raise StoreError("connection reset")


def test_store_fault_is_internal_server_error(settings) -> None:
    with TestClient(create_app(settings, _UnreachableStore())) as client:
        response = client.get("/api/notes/1")
    assert response.status_code == 500
    assert response.json()["status"]["message"] == "connection reset"
