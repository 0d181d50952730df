"""Pytest configuration for backend tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from radio_sync.core.database import init_database
from radio_sync.domain.radio import grant_role
from web.backend.main import app

ADMIN_ID = "admin-user"


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """TestClient over a fresh SQLite database with one admin."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    init_database()
    grant_role(ADMIN_ID)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-User-Id": ADMIN_ID}
