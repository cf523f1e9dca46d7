"""Tests for API: POST/DELETE /incidents, POST /refresh, GET /clusters, lifespan refresh worker."""

import inspect

import pytest

from fastapi.testclient import TestClient

import api.main as main_module


@pytest.fixture
def client():
    """Fresh TestClient; clears store and published clusters before each test."""
    main_module.store.clear()
    main_module.refresher.latest = None
    return TestClient(main_module.app)


def _upload(client, **overrides):
    payload = {"latitude": -23.2237, "longitude": -45.9009, "nature": "roubo", "date": "2025-01-01", "police_station": "1º DP"}
    payload.update(overrides)
    return client.post("/incidents", json=payload)


class TestHealth:
    def test_health_returns_ok(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok", "incidents": 0}
        assert "no-store" in r.headers["cache-control"]


class TestUploadIncident:
    def test_upload_stores_row(self, client):
        r = _upload(client)
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["data"]["incident_type"] == "roubo"
        assert data["data"]["incident_date"] == "2025-01-01"
        assert data["data"]["id"]
        assert len(main_module.store) == 1

    def test_timestamp_stored_as_calendar_date(self, client):
        r = _upload(client, date="2025-01-02T22:00:00Z")
        assert r.json()["data"]["incident_date"] == "2025-01-02"

    @pytest.mark.parametrize("overrides", [
        {"nature": ""},
        {"date": None},
        {"latitude": None},
        {"latitude": "abc"},
        {"longitude": 200},
        {"date": "not-a-date"},
        {"nature": "arson"},
    ])
    def test_invalid_upload_rejected(self, client, overrides):
        r = _upload(client, **overrides)
        assert r.status_code == 400
        assert r.json()["detail"]
        assert len(main_module.store) == 0


class TestDeleteIncident:
    def test_delete_404_when_missing(self, client):
        r = client.delete("/incidents/nonexistent")
        assert r.status_code == 404

    def test_delete_removes_row(self, client):
        row_id = _upload(client).json()["data"]["id"]
        r = client.delete(f"/incidents/{row_id}")
        assert r.status_code == 200
        assert len(main_module.store) == 0


class TestListIncidents:
    def test_newest_first(self, client):
        _upload(client, date="2025-01-01")
        _upload(client, date="2025-01-03", nature="furto")
        data = client.get("/incidents").json()
        assert data["count"] == 2
        assert [r["incident_date"] for r in data["incidents"]] == ["2025-01-03", "2025-01-01"]


class TestClusters:
    def test_refresh_two_clusters(self, client):
        _upload(client, nature="roubo", date="2025-01-01")
        _upload(client, nature="furto", date="2025-01-02", latitude=-23.2228)
        _upload(client, nature="roubo", date="2025-01-03", latitude=-23.1787)
        r = client.post("/refresh")
        assert r.status_code == 200
        data = r.json()
        assert data["incident_count"] == 3
        assert data["cluster_count"] == 2
        # newest first: the 5 km-away roubo opens the first cluster
        assert data["clusters"][0]["total_count"] == 1
        assert data["clusters"][1]["total_count"] == 2
        assert data["clusters"][1]["recent_incidents"][0]["nature"] == "furto"

    def test_get_clusters_computes_when_empty(self, client):
        r = client.get("/clusters")
        assert r.status_code == 200
        data = r.json()
        assert data["clusters"] == []
        assert data["radius_m"] == 200.0

    def test_get_clusters_returns_latest(self, client):
        _upload(client)
        seq = client.post("/refresh").json()["sequence"]
        assert client.get("/clusters").json()["sequence"] == seq


class TestLifespanWorker:
    def test_changes_are_reclustered(self):
        main_module.store.clear()
        main_module.refresher.latest = None
        with TestClient(main_module.app) as c:
            _upload(c)
            _upload(c, nature="furto", latitude=-23.2228)
            worker = main_module.app.state.refresh_worker
        # shutdown drains the queue: initial load + one refresh per insert
        assert worker.processed == 3
        assert main_module.refresher.latest.incident_count == 2
        assert len(main_module.refresher.latest.clusters) == 1


class TestConfig:
    def test_radius_env(self, monkeypatch):
        monkeypatch.setenv("CLUSTER_RADIUS_M", "500")
        assert main_module._cluster_radius_m() == 500.0
        monkeypatch.setenv("CLUSTER_RADIUS_M", "-1")
        assert main_module._cluster_radius_m() == 200.0
        monkeypatch.setenv("CLUSTER_RADIUS_M", "wide")
        assert main_module._cluster_radius_m() == 200.0

    def test_top_k_env(self, monkeypatch):
        monkeypatch.delenv("CLUSTER_TOP_K", raising=False)
        assert main_module._cluster_top_k() == 5
        monkeypatch.setenv("CLUSTER_TOP_K", "3")
        assert main_module._cluster_top_k() == 3


class TestRoutesRunOnEventLoop:
    @pytest.mark.parametrize("endpoint", [
        main_module.upload_incident,
        main_module.delete_incident,
        main_module.list_incidents,
        main_module.refresh_clusters,
        main_module.get_clusters,
        main_module.health,
    ])
    def test_store_routes_are_coroutines(self, endpoint):
        # Sync routes would run in the threadpool, next to the loop-side worker.
        assert inspect.iscoroutinefunction(endpoint)
