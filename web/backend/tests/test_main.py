"""Tests for FastAPI application."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from web.backend.main import app

client = TestClient(app)


def test_health_endpoint():
    """Test health check endpoint returns 200."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_cors_headers():
    """Test CORS headers are present for the dev frontend."""
    response = client.options(
        "/api/radio/config",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_uninitialized_store_is_503(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Test a missing radio config maps to 503 rather than a crash."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "empty"))
    monkeypatch.delenv("DATABASE_URL", raising=False)

    response = client.get("/api/radio/config")

    assert response.status_code == 503
