"""Shared fixtures for radio-sync tests."""

from pathlib import Path

import pytest

from radio_sync.core.database import init_database
from radio_sync.domain.library.models import Track


@pytest.fixture
def temp_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG dirs at a temp dir and create a fresh SQLite database."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("DATABASE_URL", raising=False)
    init_database()
    return tmp_path


@pytest.fixture
def rotation() -> list[Track]:
    """Three tracks: 100s, 50s and 150s (300s loop)."""
    return [
        Track(id="t0", title="First", artist="A", duration_seconds=100.0, audio_url="/music/0.mp3"),
        Track(id="t1", title="Second", artist="B", duration_seconds=50.0, audio_url="/music/1.mp3"),
        Track(id="t2", title="Third", artist="C", duration_seconds=150.0, audio_url="/music/2.mp3"),
    ]
