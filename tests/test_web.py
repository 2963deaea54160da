"""Tests for passkeep.web — the JSON API, via FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from passkeep.core.entry import CredentialDraft
from passkeep.core.ids import is_valid_id
from passkeep.web import EntryIn, create_app

GMAIL = {"title": "Gmail", "username": "a@b.com", "password": "p@ss"}


@pytest.fixture
def app(tmp_path, clock):
    return create_app(
        db_path=str(tmp_path / "api.db"),
        log_path=str(tmp_path / "api.log"),
        clock=clock,
    )


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


class TestGenerators:
    def test_generate_id(self, client):
        r = client.get("/api/id")
        assert r.status_code == 200
        assert is_valid_id(r.json()["id"])

    def test_ids_are_distinct(self, client):
        ids = {client.get("/api/id").json()["id"] for _ in range(20)}
        assert len(ids) == 20

    def test_current_time(self, client):
        r = client.get("/api/time")
        assert r.json() == {"time": "2026-01-01T12:00:00.000000+00:00"}

    def test_password(self, client):
        r = client.get("/api/password", params={"length": 24})
        assert r.status_code == 200
        assert len(r.json()["password"]) == 24

    def test_password_length_bounds(self, client):
        assert client.get("/api/password", params={"length": 0}).status_code == 422


class TestEntries:
    def test_create(self, client):
        r = client.post("/api/entries", json=GMAIL)
        assert r.status_code == 201
        body = r.json()
        assert is_valid_id(body["id"])
        assert body["created_at"] == body["updated_at"]
        assert body["website"] is None
        assert {k: body[k] for k in GMAIL} == GMAIL

    def test_create_empty_title(self, client):
        r = client.post("/api/entries", json={"title": "", "username": "x", "password": "y"})
        assert r.status_code == 422
        assert r.json()["field"] == "title"

    def test_create_missing_password(self, client):
        r = client.post("/api/entries", json={"title": "t", "username": "x"})
        assert r.status_code == 422
        assert r.json()["field"] == "password"

    def test_create_empty_optional(self, client):
        r = client.post("/api/entries", json={**GMAIL, "email": ""})
        assert r.status_code == 422
        assert r.json()["field"] == "email"

    def test_get(self, client):
        created = client.post("/api/entries", json=GMAIL).json()
        r = client.get(f"/api/entries/{created['id']}")
        assert r.status_code == 200
        assert r.json() == created

    def test_get_missing(self, client):
        assert client.get("/api/entries/does-not-exist").status_code == 404

    def test_edit(self, client, fake_time):
        created = client.post("/api/entries", json=GMAIL).json()
        fake_time.advance(30)

        r = client.put(f"/api/entries/{created['id']}", json={**GMAIL, "title": "Gmail2"})
        assert r.status_code == 200
        body = r.json()
        assert body["id"] == created["id"]
        assert body["title"] == "Gmail2"
        assert body["created_at"] == created["created_at"]
        assert body["updated_at"] > created["updated_at"]

    def test_edit_invalid(self, client):
        created = client.post("/api/entries", json=GMAIL).json()
        r = client.put(f"/api/entries/{created['id']}", json={**GMAIL, "username": ""})
        assert r.status_code == 422
        assert r.json()["field"] == "username"
        assert client.get(f"/api/entries/{created['id']}").json() == created

    def test_edit_missing(self, client):
        assert client.put("/api/entries/nope", json=GMAIL).status_code == 404

    def test_delete(self, client):
        created = client.post("/api/entries", json=GMAIL).json()
        assert client.delete(f"/api/entries/{created['id']}").status_code == 204
        assert client.get(f"/api/entries/{created['id']}").status_code == 404
        assert client.delete(f"/api/entries/{created['id']}").status_code == 404

    def test_list_sort_and_search(self, client, fake_time):
        for title in ("beta", "Alpha", "gamma"):
            client.post("/api/entries", json={**GMAIL, "title": title})
            fake_time.advance(1)

        newest_first = [e["title"] for e in client.get("/api/entries").json()]
        assert newest_first == ["gamma", "Alpha", "beta"]

        by_title = client.get("/api/entries", params={"sort": "title", "order": "asc"}).json()
        assert [e["title"] for e in by_title] == ["Alpha", "beta", "gamma"]

        found = client.get("/api/entries", params={"search": "ALP"}).json()
        assert [e["title"] for e in found] == ["Alpha"]

    def test_list_rejects_unknown_sort(self, client):
        assert client.get("/api/entries", params={"sort": "password"}).status_code == 422


class TestEntryIn:
    def test_to_draft_carries_every_field(self):
        data = EntryIn(**GMAIL, website="mail.google.com")
        draft = data.to_draft()
        assert draft == CredentialDraft(
            title="Gmail", username="a@b.com", password="p@ss", website="mail.google.com"
        )

    def test_to_draft_leaves_missing_fields_none(self):
        draft = EntryIn(title="t").to_draft()
        assert draft.username is None
        assert draft.email is None


class TestHeaders:
    def test_security_headers(self, client):
        r = client.get("/api/time")
        assert r.headers["X-Content-Type-Options"] == "nosniff"
        assert r.headers["X-Frame-Options"] == "DENY"
        assert r.headers["Referrer-Policy"] == "no-referrer"
        assert "frame-ancestors 'none'" in r.headers["Content-Security-Policy"]

    def test_headers_on_errors(self, client):
        r = client.get("/api/entries/missing")
        assert r.status_code == 404
        assert r.headers["Cache-Control"] == "no-store"
