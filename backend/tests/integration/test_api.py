"""HTTP API tests through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from landguard.api.deps import get_corpus
from landguard.config import get_settings

from conftest import STEP, InMemoryCorpus, rect


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    get_settings.cache_clear()

    from landguard.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client

    get_settings.cache_clear()


@pytest.fixture
def fake_corpus(client):
    corpus = InMemoryCorpus()
    client.app.dependency_overrides[get_corpus] = lambda: corpus
    yield corpus
    client.app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready(self, client):
        response = client.get("/health/ready")
        assert response.json() == {"status": "ready", "database": "connected"}


class TestParcelEndpoints:
    def test_validate_valid(self, client, square_geojson):
        response = client.post("/api/v1/parcels/validate", json={"geojson": square_geojson})
        assert response.status_code == 200
        body = response.json()
        assert body["is_valid"] is True
        assert body["metrics"]["num_vertices"] == 4

    def test_validate_reports_defects_in_body(self, client, bowtie_geojson):
        response = client.post("/api/v1/parcels/validate", json={"geojson": bowtie_geojson})
        assert response.status_code == 200
        assert response.json()["is_valid"] is False

    def test_check_overlap_empty_corpus(self, client, square_geojson):
        response = client.post("/api/v1/parcels/check-overlap", json={"geojson": square_geojson})
        assert response.status_code == 200
        assert response.json()["can_proceed"] is True

    def test_check_overlap_rejects_unreadable_geojson(self, client):
        response = client.post(
            "/api/v1/parcels/check-overlap",
            json={"geojson": {"type": "Point", "coordinates": [0, 0]}},
        )
        assert response.status_code == 400
        assert "Unsupported geometry type" in response.json()["detail"]

    def test_check_overlap_blocks(self, client, fake_corpus, square_geojson):
        fake_corpus.add_parcel("taken", rect(0.0, 0.0, STEP / 2, STEP))
        response = client.post("/api/v1/parcels/check-overlap", json={"geojson": square_geojson})
        body = response.json()
        assert body["can_proceed"] is False
        assert body["overlapping_properties"][0]["severity"] == "significant"


class TestListingBoundary:
    def test_unknown_listing(self, client, square_geojson):
        response = client.post("/api/v1/listings/missing/boundary", json={"geojson": square_geojson})
        assert response.status_code == 404

    def test_accepted_boundary(self, client, fake_corpus, square_geojson):
        fake_corpus.add_listing("plot-1")
        response = client.post("/api/v1/listings/plot-1/boundary", json={"geojson": square_geojson})
        assert response.status_code == 200
        body = response.json()
        assert body["decision"]["allow"] is True
        assert body["decision"]["state"] == "accepted"
        assert body["polygon_version"] == 1


class TestFraudEndpoints:
    def test_detect_and_list(self, client, fake_corpus, square_geojson):
        fake_corpus.add_parcel("original", square_geojson)
        response = client.post(
            "/api/v1/fraud/detect",
            json={
                "listing_id": "copy",
                "user_id": "user-9",
                "geojson": square_geojson,
                "price": 5_000_000,
                "property_type": "land",
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["total_signals"] == 1
        assert body["total_score"] == 20
        assert body["polygon_check"]["signals"][0]["signal_type"] == "duplicate_polygon"

    def test_detect_rejects_unreadable_geojson(self, client):
        response = client.post(
            "/api/v1/fraud/detect",
            json={
                "listing_id": "l",
                "user_id": "u",
                "geojson": "nonsense",
                "price": 1,
                "property_type": "land",
            },
        )
        assert response.status_code == 400

    def test_signals_persisted_to_database(self, client, square_geojson, bowtie_geojson):
        client.post(
            "/api/v1/fraud/detect",
            json={
                "listing_id": "twisted",
                "user_id": "user-5",
                "geojson": bowtie_geojson,
                "price": 5_000_000,
                "property_type": "land",
            },
        )
        response = client.get("/api/v1/fraud/signals", params={"user_id": "user-5"})
        body = response.json()
        assert body["count"] == 1
        assert body["total_score"] == 15
        assert body["signals"][0]["signal_type"] == "self_intersecting_polygon"
