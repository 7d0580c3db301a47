"""HTTP tests for metrics, health and middleware."""

from datetime import date, timedelta


def test_metrics_empty_backlog(client):
    resp = client.get("/metrics")

    assert resp.status_code == 200
    assert resp.json() == {
        "backlog_health_pct": 100.0,
        "sla_breach_rate_pct": 0.0,
        "overdue_count": 0,
        "risk": {"avg": 0.0},
    }


def test_metrics_counts_overdue(client):
    overdue = (date.today() - timedelta(days=5)).isoformat()
    client.post("/workitems", json={"title": "late", "service": "web", "priority": "Low", "due_date": overdue})
    client.post("/workitems", json={"title": "fresh", "service": "web", "priority": "Low"})

    data = client.get("/metrics").json()

    assert data["overdue_count"] == 1
    assert data["sla_breach_rate_pct"] == 50.0
    assert data["backlog_health_pct"] == 100.0


def test_manual_snapshot_is_idempotent(client):
    first = client.post("/metrics/snapshots")
    second = client.post("/metrics/snapshots")

    assert first.status_code == 200
    assert first.json()["captured"] is True
    assert first.json()["snapshot"]["backlog_health_pct"] == 100.0
    assert second.json() == {"captured": False, "snapshot": None}

    history = client.get("/metrics/history").json()
    assert history["count"] == 1
    assert history["points"][0]["id"] == first.json()["snapshot"]["id"]


def test_history_limit_bounds(client):
    assert client.get("/metrics/history", params={"limit": 0}).status_code == 422
    assert client.get("/metrics/history", params={"limit": 366}).status_code == 422
    assert client.get("/metrics/history", params={"limit": 365}).status_code == 200


def test_health_reports_backend_and_scheduler(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    checks = resp.json()["checks"]
    assert checks["backend"] == "memory"
    assert checks["snapshot_scheduler"] == "disabled"


def test_root(client):
    data = client.get("/").json()
    assert data["service"] == "DevOps Guard"
    assert "metrics" in data["modules"]


def test_correlation_id_echoed(client):
    resp = client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    assert resp.headers["x-correlation-id"] == "abc-123"

    generated = client.get("/health")
    assert generated.headers["x-correlation-id"]
