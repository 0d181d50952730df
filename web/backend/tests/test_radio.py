"""Tests for the radio API endpoints."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from radio_sync.domain.library.catalog import add_track
from web.backend.deps import get_now
from web.backend.main import app

EPOCH = 1_700_000_000


@pytest.fixture
def tracks(client: TestClient):
    """Two-track rotation: 100s then 50s."""
    first = add_track("Opener", artist="Band", duration_seconds=100, audio_url="/a.mp3", sort_order=0)
    second = add_track(
        "Video", duration_seconds=50, youtube_url="https://youtu.be/dQw4w9WgXcQ", sort_order=1
    )
    return first, second


def _freeze(now: float) -> None:
    app.dependency_overrides[get_now] = lambda: now


def _go_live(client: TestClient, admin_headers: dict) -> dict:
    _freeze(EPOCH)
    response = client.post("/api/radio/live", json={"is_live": True}, headers=admin_headers)
    assert response.status_code == 200
    return response.json()


class TestConfig:
    """GET /api/radio/config"""

    def test_initial_config_is_offline(self, client: TestClient):
        response = client.get("/api/radio/config")

        assert response.status_code == 200
        assert response.json() == {"is_live": False, "loop_start_epoch": 0, "mode": "rotation"}


class TestLive:
    """POST /api/radio/live"""

    def test_requires_admin(self, client: TestClient):
        response = client.post("/api/radio/live", json={"is_live": True})
        assert response.status_code == 403

        response = client.post(
            "/api/radio/live", json={"is_live": True}, headers={"X-User-Id": "listener"}
        )
        assert response.status_code == 403

    def test_going_live_stamps_epoch(self, client: TestClient, admin_headers: dict):
        body = _go_live(client, admin_headers)

        assert body["is_live"] is True
        assert body["loop_start_epoch"] == EPOCH

    def test_going_offline_keeps_epoch(self, client: TestClient, admin_headers: dict):
        _go_live(client, admin_headers)

        response = client.post("/api/radio/live", json={"is_live": False}, headers=admin_headers)

        assert response.json() == {"is_live": False, "loop_start_epoch": EPOCH, "mode": "rotation"}


class TestNowPlaying:
    """GET /api/radio/now-playing"""

    def test_offline_is_404(self, client: TestClient, tracks):
        response = client.get("/api/radio/now-playing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Radio is offline"

    def test_empty_rotation_is_404(self, client: TestClient, admin_headers: dict):
        _go_live(client, admin_headers)

        response = client.get("/api/radio/now-playing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Nothing playing"

    def test_position_follows_clock(self, client: TestClient, admin_headers: dict, tracks):
        _, second = tracks
        _go_live(client, admin_headers)
        _freeze(EPOCH + 120)

        body = client.get("/api/radio/now-playing").json()

        assert body["track"]["id"] == second.id
        assert body["track"]["external_ref"] == "dQw4w9WgXcQ"
        assert body["position_seconds"] == pytest.approx(20.0)
        assert body["track_index"] == 1
        assert body["from_schedule"] is False
        assert body["server_time"] == EPOCH + 120

    def test_loop_wraps(self, client: TestClient, admin_headers: dict, tracks):
        first, _ = tracks
        _go_live(client, admin_headers)
        _freeze(EPOCH + 150 * 3 + 10)

        body = client.get("/api/radio/now-playing").json()

        assert body["track"]["id"] == first.id
        assert body["position_seconds"] == pytest.approx(10.0)


class TestExclusives:
    """Hidden tracks on air and the next-exclusive countdown."""

    @pytest.fixture
    def secret(self, client: TestClient, admin_headers: dict, tracks):
        track = add_track(
            "Unreleased", artist="Band", duration_seconds=30, audio_url="/secret.mp3", is_hidden=True
        )
        client.put("/api/radio/mode", json={"mode": "hybrid"}, headers=admin_headers)
        return track

    def _schedule(self, client: TestClient, admin_headers: dict, track_id: str, start: str, end: str):
        response = client.post(
            "/api/radio/schedule",
            json={"track_id": track_id, "start_time": start, "end_time": end},
            headers=admin_headers,
        )
        assert response.status_code == 201

    def test_exclusive_on_air_is_masked_for_listeners(
        self, client: TestClient, admin_headers: dict, secret
    ):
        self._schedule(client, admin_headers, secret.id, "00:00", "00:00")
        _go_live(client, admin_headers)

        track = client.get("/api/radio/now-playing").json()["track"]

        assert track["is_exclusive"] is True
        assert track["title"] == "Exclusive track"
        assert track["artist"] == ""
        assert track["audio_url"] is None
        assert track["external_ref"] is None

    def test_admin_sees_exclusive_metadata(self, client: TestClient, admin_headers: dict, secret):
        self._schedule(client, admin_headers, secret.id, "00:00", "00:00")
        _go_live(client, admin_headers)

        body = client.get("/api/radio/now-playing", headers=admin_headers).json()

        assert body["from_schedule"] is True
        assert body["track"]["title"] == "Unreleased"
        assert body["track"]["audio_url"] == "/secret.mp3"

    def test_next_exclusive_countdown(self, client: TestClient, admin_headers: dict, secret):
        self._schedule(client, admin_headers, secret.id, "13:30", "14:00")
        _freeze(datetime(2024, 1, 7, 12, 0).timestamp())

        body = client.get("/api/radio/next-exclusive").json()

        assert body["is_live"] is False
        assert body["starts_in_seconds"] == pytest.approx(5400)
        assert body["start_time"] == "13:30"
        assert body["track"]["title"] == "Exclusive track"

    def test_next_exclusive_live(self, client: TestClient, admin_headers: dict, secret):
        self._schedule(client, admin_headers, secret.id, "00:00", "00:00")

        body = client.get("/api/radio/next-exclusive", headers=admin_headers).json()

        assert body["is_live"] is True
        assert body["starts_in_seconds"] == 0
        assert body["track"]["title"] == "Unreleased"

    def test_no_exclusive_is_404(self, client: TestClient, tracks):
        assert client.get("/api/radio/next-exclusive").status_code == 404


class TestTracks:
    """GET /api/radio/tracks"""

    def test_rotation_order_excludes_hidden(self, client: TestClient, tracks):
        add_track("Secret", duration_seconds=30, audio_url="/s.mp3", is_hidden=True)

        response = client.get("/api/radio/tracks")

        assert [t["id"] for t in response.json()] == [t.id for t in tracks]


class TestMode:
    """PUT /api/radio/mode"""

    def test_admin_can_switch(self, client: TestClient, admin_headers: dict):
        response = client.put("/api/radio/mode", json={"mode": "hybrid"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["mode"] == "hybrid"

    def test_unknown_mode_is_400(self, client: TestClient, admin_headers: dict):
        response = client.put("/api/radio/mode", json={"mode": "shuffle"}, headers=admin_headers)
        assert response.status_code == 400

    def test_requires_admin(self, client: TestClient):
        response = client.put("/api/radio/mode", json={"mode": "hybrid"})
        assert response.status_code == 403


class TestSchedule:
    """Schedule CRUD under /api/radio/schedule"""

    def test_create_list_update_delete(self, client: TestClient, admin_headers: dict, tracks):
        first, second = tracks
        created = client.post(
            "/api/radio/schedule",
            json={"track_id": first.id, "start_time": "09:00", "end_time": "10:00", "day_of_week": 1},
            headers=admin_headers,
        )
        assert created.status_code == 201
        entry_id = created.json()["id"]

        listed = client.get("/api/radio/schedule").json()
        assert [e["id"] for e in listed] == [entry_id]

        updated = client.put(
            f"/api/radio/schedule/{entry_id}",
            json={"track_id": second.id, "priority": 5},
            headers=admin_headers,
        )
        assert updated.status_code == 200
        assert updated.json()["track_id"] == second.id
        assert updated.json()["priority"] == 5
        assert updated.json()["start_time"] == "09:00"

        deleted = client.delete(f"/api/radio/schedule/{entry_id}", headers=admin_headers)
        assert deleted.json() == {"ok": True}
        assert client.get("/api/radio/schedule").json() == []

    def test_null_day_resets_to_every_day(self, client: TestClient, admin_headers: dict, tracks):
        created = client.post(
            "/api/radio/schedule",
            json={"track_id": tracks[0].id, "start_time": "09:00", "end_time": "10:00", "day_of_week": 4},
            headers=admin_headers,
        ).json()
        url = f"/api/radio/schedule/{created['id']}"

        kept = client.put(url, json={"priority": 2}, headers=admin_headers).json()
        assert kept["day_of_week"] == 4

        reset = client.put(url, json={"day_of_week": None}, headers=admin_headers).json()
        assert reset["day_of_week"] is None

    def test_writes_require_admin(self, client: TestClient, tracks):
        first, _ = tracks
        response = client.post(
            "/api/radio/schedule",
            json={"track_id": first.id, "start_time": "09:00", "end_time": "10:00"},
        )
        assert response.status_code == 403
        assert client.delete("/api/radio/schedule/whatever").status_code == 403

    @pytest.mark.parametrize(
        "payload",
        [
            {"track_id": "missing", "start_time": "09:00", "end_time": "10:00"},
            {"track_id": None, "start_time": "9am", "end_time": "10:00"},
            {"track_id": None, "start_time": "09:00", "end_time": "10:00", "day_of_week": 7},
        ],
    )
    def test_invalid_entry_is_400(self, client: TestClient, admin_headers: dict, tracks, payload):
        payload = {**payload, "track_id": payload["track_id"] or tracks[0].id}

        response = client.post("/api/radio/schedule", json=payload, headers=admin_headers)

        assert response.status_code == 400

    def test_missing_entry_is_404(self, client: TestClient, admin_headers: dict):
        response = client.put("/api/radio/schedule/nope", json={"priority": 1}, headers=admin_headers)
        assert response.status_code == 404

        response = client.delete("/api/radio/schedule/nope", headers=admin_headers)
        assert response.status_code == 404
