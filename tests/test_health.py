"""Health endpoint tests."""

from fastapi.testclient import TestClient

from docsync import __version__


def test_liveness_reports_alive_and_version(client: TestClient) -> None:
    response = client.get("/api/v1/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive", "version": __version__}


def test_readiness_ok_when_dependencies_available(client: TestClient) -> None:
    """Readiness passes with a working store, engine and enrichment config."""
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ready"
    assert body["index"] == "document_stores"
    assert {c["name"]: c["status"] for c in body["checks"]} == {
        "store": "ok",
        "search_engine": "ok",
        "enrichment": "ok",
    }


def test_readiness_fails_when_engine_down(client: TestClient, engine) -> None:
    """Readiness reports 503 when the search engine is unavailable."""
    engine.healthy = False
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 503
    checks = {c["name"]: c["status"] for c in response.json()["checks"]}
    assert checks["search_engine"] == "failed"
    assert checks["store"] == "ok"


def test_unconfigured_enrichment_is_degraded_not_unready(
    client: TestClient, enrichment
) -> None:
    enrichment.enabled = False
    response = client.get("/api/v1/health/ready")
    assert response.status_code == 200
    enrichment_check = next(
        c for c in response.json()["checks"] if c["name"] == "enrichment"
    )
    assert enrichment_check["status"] == "degraded"
    assert "not configured" in enrichment_check["message"]
