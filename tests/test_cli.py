"""Tests for the radio-sync command line."""

from pathlib import Path
from unittest.mock import patch

import pytest

from radio_sync.cli import build_parser, dispatch
from radio_sync.core.config import Config
from radio_sync.domain.library import get_active_tracks
from radio_sync.domain.radio import NotAuthorizedError, get_radio_config, get_schedule_entries


def run(*argv: str) -> int:
    return dispatch(build_parser().parse_args(argv), Config())


class TestParser:
    """Tests for build_parser."""

    def test_live_requires_user(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["live", "on"])

    def test_mode_choices(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["mode", "shuffle", "--user", "u"])


class TestAdminCommands:
    """Admin commands write the shared store."""

    def test_live_toggle_needs_admin(self, temp_data_dir: Path) -> None:
        with pytest.raises(NotAuthorizedError):
            run("live", "on", "--user", "nobody")

        assert get_radio_config().is_live is False

    def test_granted_admin_can_go_live(self, temp_data_dir: Path) -> None:
        assert run("grant-admin", "dj") == 0

        with patch("radio_sync.domain.radio.station.time.time", return_value=1234.9):
            assert run("live", "on", "--user", "dj") == 0

        config = get_radio_config()
        assert config.is_live is True
        assert config.loop_start_epoch == 1234

        assert run("live", "off", "--user", "dj") == 0
        assert get_radio_config().loop_start_epoch == 1234

    def test_mode(self, temp_data_dir: Path) -> None:
        run("grant-admin", "dj")

        assert run("mode", "hybrid", "--user", "dj") == 0
        assert get_radio_config().mode == "hybrid"


class TestCatalogCommands:
    """tracks and schedule subcommands."""

    def test_add_track_and_schedule_it(self, temp_data_dir: Path) -> None:
        assert run("tracks", "add", "Intro", "--duration", "90", "--audio-url", "/intro.mp3") == 0
        (track,) = get_active_tracks()

        assert run("schedule", "add", track.id, "08:00", "09:00", "--day", "1") == 0
        (entry,) = get_schedule_entries()
        assert entry.track_id == track.id
        assert entry.day_of_week == 1

        assert run("tracks", "list") == 0
        assert run("schedule", "list") == 0

        assert run("schedule", "remove", entry.id) == 0
        assert get_schedule_entries() == []

    def test_remove_missing_slot_fails(self, temp_data_dir: Path) -> None:
        assert run("schedule", "remove", "nope") == 1

    def test_now_when_offline(self, temp_data_dir: Path) -> None:
        assert run("now") == 0
