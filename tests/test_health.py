# tests/test_health.py
from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict

import httpx
import pytest
from fastapi.testclient import TestClient

from catalog.core.settings import Settings
from catalog.main import create_app

# Latență maximă acceptată pentru /health (secunde)
MAX_HEALTH_LATENCY = 1.5


# --- Utilitare ----------------------------------------------------------------
def _dump_response(r: httpx.Response) -> str:
    """Diagnostic scurt pentru mesaje de aserție."""
    try:
        j = r.json()
    except ValueError:
        j = None
    snippet = (r.text or "")[:400].replace("\n", "\\n")
    return f"status={r.status_code} {r.request.method} {r.request.url} json={j!r} text='{snippet}...'"


def _get_json(r: httpx.Response) -> Dict[str, Any]:
    ctype = r.headers.get("content-type", "").lower()
    assert ctype.startswith("application/json"), f"unexpected content-type: {ctype} | {_dump_response(r)}"
    return r.json()


# --- Teste --------------------------------------------------------------------
@pytest.mark.timeout(5)
def test_health_ok(client: TestClient):
    t0 = time.perf_counter()
    r = client.get("/health")
    dt = time.perf_counter() - t0

    assert r.status_code == 200, _dump_response(r)
    assert dt <= MAX_HEALTH_LATENCY, f"/health too slow: {dt:.3f}s > {MAX_HEALTH_LATENCY:.3f}s"
    assert _get_json(r).get("status") == "ok"


@pytest.mark.timeout(5)
def test_root_and_version(client: TestClient, settings: Settings):
    body = _get_json(client.get("/"))
    assert body == {"name": settings.APP_TITLE, "version": settings.APP_VERSION}

    meta = _get_json(client.get("/__version__"))
    assert meta["app_version"] == settings.APP_VERSION
    assert isinstance(meta["started_at"], int)

    up = _get_json(client.get("/health/uptime"))
    assert up["uptime_seconds"] >= 0


@pytest.mark.timeout(5)
def test_health_stores_reports_counts(client: TestClient):
    body = _get_json(client.get("/health/stores"))
    assert body["status"] == "ok"
    assert body["products"]["count"] == 0
    assert body["skus"]["count"] == 0

    r = client.post("/products", json={"name": "Soil", "unit": "g", "created_by": 1})
    assert r.status_code == 201, _dump_response(r)
    body = _get_json(client.get("/health/stores"))
    assert body["products"]["count"] == 1
    assert body["products"]["path"].endswith("products.db")


@pytest.mark.timeout(5)
def test_health_stores_unavailable_without_lifespan(settings: Settings):
    # fără `with`, lifespan-ul nu rulează și colecțiile nu sunt încărcate
    c = TestClient(create_app(settings))
    r = c.get("/health/stores")
    assert r.status_code == 503, _dump_response(r)


@pytest.mark.timeout(5)
def test_request_id_and_timing_headers(client: TestClient):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["x-request-id"] == "abc123"
    assert r.headers["x-process-time"].endswith("ms")
    assert r.headers["server-timing"].startswith("app;dur=")
    assert "x-app-version" in r.headers

    r = client.get("/health")
    assert r.headers.get("x-request-id")


@pytest.mark.timeout(5)
def test_unknown_route_is_json_404(client: TestClient):
    r = client.get("/does-not-exist")
    assert r.status_code == 404, _dump_response(r)
    assert _get_json(r)["detail"]["path"] == "/does-not-exist"


@pytest.mark.timeout(5)
def test_unreadable_store_fails_startup(tmp_path: Path):
    bad = tmp_path / "products.db"
    bad.write_bytes(b"not sqlite at all\n" * 64)
    s = Settings(PRODUCT_DB_PATH=str(bad), SKU_DB_PATH=str(tmp_path / "skus.db"))
    # StorageError la încărcare => aplicația nu pornește
    with pytest.raises(Exception):
        with TestClient(create_app(s)):
            pass
