import pytest
from starlette.testclient import TestClient

import zipradius.api.routes as routes
from zipradius.api.app import app
from zipradius.config.settings import GeocodingSettings, Settings


class _StubGeocoder:
    def geocode_postcode(self, label):
        return None


@pytest.fixture
def client(monkeypatch, sample_dataset):
    # Keep API tests offline and independent of the configured dataset path.
    monkeypatch.setattr(routes, "_dataset", lambda: sample_dataset)
    monkeypatch.setattr(routes, "_geocoder", lambda: _StubGeocoder())
    with TestClient(app) as c:
        yield c


def test_search_returns_matches_plan_and_meta(client):
    resp = client.post("/api/search", json={"seeds": "10001, 90210, 99999", "radius_mi": 10})

    assert resp.status_code == 200
    data = resp.json()
    assert [s["label"] for s in data["seeds"]] == ["10001", "90210"]
    assert data["unresolved"] == ["99999"]
    assert data["summary"]["match_count"] == 10
    assert data["plan"]["kind"] == "split"
    assert len(data["viewports"]) == 2
    assert isinstance(data["meta"]["elapsed_ms"], int)
    assert set(data["meta"]["cache"]) == {"hits", "misses", "sets", "stale_fallbacks"}


def test_search_validation_errors_are_400(client):
    resp = client.post("/api/search", json={"seeds": "10001", "radius_mi": 75})
    assert resp.status_code == 400
    assert resp.json()["detail"]["code"] == "VALIDATION_ERROR"

    resp = client.post("/api/search", json={"seeds": "99999"})
    assert resp.status_code == 400

    resp = client.post("/api/search", json={"seeds": "10001", "settings_overrides": {"dataset": {"path": "/etc"}}})
    assert resp.status_code == 400
    assert "dataset" in resp.json()["detail"]["message"]


def test_search_rejects_malformed_body(client):
    assert client.post("/api/search", json={"seeds": "10001", "mode": "diagonal"}).status_code == 422


def test_layout_endpoint(client):
    payload = {
        "seeds": [
            {"label": "nyc", "location": {"lat": 40.7505, "lon": -73.9934}},
            {"label": "la", "location": {"lat": 34.0901, "lon": -118.4065}},
        ],
        "radius_mi": 10,
    }
    resp = client.post("/api/layout", json=payload)

    assert resp.status_code == 200
    data = resp.json()
    assert data["plan"]["kind"] == "split"
    assert [c["label"] for c in data["circles"]] == ["nyc", "la"]


def test_dataset_stats_endpoint(client):
    resp = client.get("/api/dataset")
    assert resp.status_code == 200
    assert resp.json()["stats"]["total_records"] == 15


def test_dataset_missing_is_503(monkeypatch):
    def missing():
        raise FileNotFoundError("data/zipCodeDatabase.json")

    monkeypatch.setattr(routes, "_dataset", missing)
    with TestClient(app) as c:
        resp = c.get("/api/dataset")
    assert resp.status_code == 503
    assert resp.json()["detail"]["code"] == "DATASET_UNAVAILABLE"


def test_public_settings_redact_token(client, monkeypatch):
    monkeypatch.setattr(routes, "get_settings", lambda: Settings(geocoding=GeocodingSettings(access_token="secret")))
    data = client.get("/api/settings").json()
    assert data["geocoding"]["access_token"] == "***"
    assert data["layout"]["cluster_threshold_mi"] == 30


def test_local_frontend_origin_is_allowed_by_default(client):
    resp = client.get("/api/dataset", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_explicit_cors_origins(monkeypatch):
    from zipradius.api.app import create_app

    monkeypatch.setenv("ZIPRADIUS_CORS_ORIGINS", "https://maps.example.com")
    with TestClient(create_app()) as c:
        ok = c.get("/api/settings", headers={"Origin": "https://maps.example.com"})
        other = c.get("/api/settings", headers={"Origin": "http://localhost:5173"})
    assert ok.headers["access-control-allow-origin"] == "https://maps.example.com"
    assert "access-control-allow-origin" not in other.headers
