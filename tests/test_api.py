"""
Tests for the /api/coffee routes.

The router is mounted on a bare FastAPI app with an in-memory store.
"""

import pytest
from pathlib import Path
from unittest.mock import MagicMock
from urllib.parse import quote
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from fastapi.testclient import TestClient

from coffeelog.api import create_api_router
from coffeelog.models import RecordKey
from coffeelog.storage.memory_backend import MemoryBackend

OWNER = "default-user"
T1 = "2024-03-01T09:30:00.000Z"


@pytest.fixture
def store():
    return MemoryBackend([
        {"userId": OWNER, "timestamp": T1, "amount": 200, "unit": "ml"},
    ])


@pytest.fixture
def client(store):
    app = FastAPI()
    app.include_router(create_api_router(store, OWNER))
    return TestClient(app)


def entry_url(entry_id):
    return f"/api/coffee/{quote(entry_id, safe='')}"


class TestGetEntry:

    def test_found(self, client):
        response = client.get(entry_url(T1))

        assert response.status_code == 200
        assert response.json() == {"userId": OWNER, "timestamp": T1, "amount": 200, "unit": "ml"}

    def test_not_found(self, client):
        response = client.get(entry_url("2000-01-01T00:00:00.000Z"))

        assert response.status_code == 404
        assert response.json() == {"error": "Coffee entry not found"}

    def test_store_failure(self):
        broken = MagicMock()
        broken.get_record.side_effect = OSError("disk gone")
        app = FastAPI()
        app.include_router(create_api_router(broken, OWNER))

        response = TestClient(app).get(entry_url(T1))

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to fetch coffee entry"}


class TestUpdateEntry:

    def test_location_patch(self, client, store):
        response = client.put(entry_url(T1), json={"location": "Office"})

        assert response.status_code == 200
        body = response.json()
        assert body["location"] == "Office"
        assert "rating" not in body
        assert store.get_record(RecordKey(OWNER, T1))["location"] == "Office"

    def test_rating_out_of_range(self, client, store):
        response = client.put(entry_url(T1), json={"rating": 6})

        assert response.status_code == 400
        assert response.json() == {"error": "rating out of range"}
        assert "rating" not in store.get_record(RecordKey(OWNER, T1))

    def test_null_rating_rejected(self, client):
        response = client.put(entry_url(T1), json={"rating": None, "location": "x"})

        assert response.status_code == 400
        assert response.json() == {"error": "rating out of range"}

    def test_empty_patch(self, client):
        response = client.put(entry_url(T1), json={})

        assert response.status_code == 400
        assert response.json() == {"error": "no fields to update"}

    def test_identity_keys_ignored(self, client, store):
        response = client.put(entry_url(T1), json={"timestamp": "other", "userId": "x"})

        assert response.status_code == 400
        assert response.json() == {"error": "no fields to update"}
        assert store.get_record(RecordKey(OWNER, T1)) is not None

    def test_non_object_body(self, client):
        response = client.put(entry_url(T1), json=[1, 2])
        assert response.status_code == 400

    def test_unknown_entry_is_storage_failure(self, client):
        response = client.put(entry_url("nope"), json={"rating": 3})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to update coffee entry"}

    def test_round_trip_keeps_rating(self, client):
        client.put(entry_url(T1), json={"rating": 4})
        client.put(entry_url(T1), json={"location": "Cafe"})

        body = client.get(entry_url(T1)).json()
        assert body["rating"] == 4
        assert body["location"] == "Cafe"


class TestListAndCreate:

    def test_create_and_list_newest_first(self, client):
        response = client.post("/api/coffee", json={
            "timestamp": "2024-03-02T10:00:00.000Z", "amount": 1.5, "unit": "cups",
            "rating": 5, "location": "Home",
        })
        assert response.status_code == 200
        assert response.json()["success"] is True

        listing = client.get("/api/coffee").json()
        assert [e["timestamp"] for e in listing] == ["2024-03-02T10:00:00.000Z", T1]
        assert listing[0]["userId"] == OWNER

    def test_create_fills_timestamp(self, client):
        response = client.post("/api/coffee", json={"amount": 30, "unit": "fl_oz"})

        assert response.status_code == 200
        assert response.json()["entry"]["timestamp"].endswith("Z")

    def test_create_duplicate_conflicts(self, client):
        response = client.post("/api/coffee", json={"timestamp": T1, "amount": 1, "unit": "ml"})
        assert response.status_code == 409

    @pytest.mark.parametrize("body", [
        {"amount": 0, "unit": "ml"},
        {"amount": -3, "unit": "ml"},
        {"amount": "200", "unit": "ml"},
        {"amount": 200, "unit": "litres"},
        {"amount": 200, "unit": "ml", "rating": 9},
    ])
    def test_create_validation(self, client, body):
        response = client.post("/api/coffee", json=body)

        assert response.status_code == 400
        assert "error" in response.json()

    def test_list_limit(self, store):
        for day in range(10, 25):
            store.put_record({"userId": OWNER, "timestamp": f"2024-04-{day}T08:00:00.000Z",
                              "amount": 1, "unit": "cups"})
        app = FastAPI()
        app.include_router(create_api_router(store, OWNER, recent_limit=10))

        listing = TestClient(app).get("/api/coffee").json()

        assert len(listing) == 10
        assert listing[0]["timestamp"] == "2024-04-24T08:00:00.000Z"
