"""
Tests for D1 report record API endpoints
"""

import pytest
from fastapi.testclient import TestClient

from d1_records.store import get_record_store
from main import app

pytestmark = pytest.mark.unit


@pytest.fixture
def client(record_store):
    app.dependency_overrides[get_record_store] = lambda: record_store
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestReportsAPI:
    def test_list_empty(self, client):
        response = client.get("/api/v1/reports")

        assert response.status_code == 200
        assert response.json() == {"total": 0, "reports": []}

    def test_create_assigns_identifier(self, client, record_store):
        response = client.post("/api/v1/reports", json={"unit": "HEM", "title": "Hari Sukan"})

        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["status"] == "Draft"
        assert data["unit"] == "HEM"
        assert record_store.get(data["id"]).title == "Hari Sukan"

    def test_create_twice_distinct_ids(self, client):
        first = client.post("/api/v1/reports", json={}).json()
        second = client.post("/api/v1/reports", json={}).json()

        assert first["id"] != second["id"]

    def test_create_rejects_server_fields(self, client):
        response = client.post("/api/v1/reports", json={"id": "custom", "title": "X"})

        assert response.status_code == 422

    def test_create_rejects_bad_photo(self, client):
        response = client.post("/api/v1/reports", json={"photos": ["not-a-data-uri"]})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_get_missing_is_404(self, client):
        response = client.get("/api/v1/reports/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_put_replaces_editable_fields(self, client, record_store, sample_record):
        record_store.save(sample_record)

        response = client.put(f"/api/v1/reports/{sample_record.id}", json={"unit": "PIBG", "title": "Mesyuarat Agung"})

        assert response.status_code == 200
        stored = record_store.get(sample_record.id)
        assert stored.title == "Mesyuarat Agung"
        assert stored.created_at == sample_record.created_at
        assert record_store.count() == 1

    def test_list_returns_summaries_in_insertion_order(self, client, record_store, make_record, photo_uri):
        first = make_record(photos=[photo_uri])
        second = make_record(unit="HEM")
        record_store.save(first)
        record_store.save(second)

        data = client.get("/api/v1/reports").json()

        assert data["total"] == 2
        assert [r["id"] for r in data["reports"]] == [first.id, second.id]
        assert data["reports"][0]["photo_count"] == 1
