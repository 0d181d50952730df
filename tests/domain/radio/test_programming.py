"""Tests for program selection (schedule + rotation)."""

from datetime import datetime

import pytest

from radio_sync.domain.library.models import Track
from radio_sync.domain.radio.models import (
    MODE_HYBRID,
    MODE_ROTATION,
    MODE_SCHEDULED,
    RadioConfig,
    ScheduleEntry,
)
from radio_sync.domain.radio.programming import select_program

# Sunday, 200s into the 10-minute repeat of a slot that opened at 08:00
NOW = datetime(2024, 1, 7, 12, 3, 20).timestamp()
EPOCH = int(NOW) - 1100


@pytest.fixture
def exclusive() -> Track:
    return Track(
        id="x1",
        title="Exclusive",
        duration_seconds=600.0,
        audio_url="/music/x.mp3",
        is_hidden=True,
    )


@pytest.fixture
def slot() -> list[ScheduleEntry]:
    return [
        ScheduleEntry(
            id="s1",
            track_id="x1",
            day_of_week=None,
            start_time="08:00",
            end_time="14:00",
        )
    ]


class TestSelectProgram:
    """Tests for select_program."""

    def test_rotation_mode_ignores_schedule(
        self, rotation: list[Track], exclusive: Track, slot: list[ScheduleEntry]
    ) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH, mode=MODE_ROTATION)

        program = select_program(config, rotation + [exclusive], slot, NOW)

        # 1100s after the epoch is 200s into the 300s loop
        assert program.from_schedule is False
        assert program.track.id == "t2"
        assert program.track_index == 2
        assert program.position_seconds == pytest.approx(50.0)

    def test_hybrid_plays_scheduled_track_at_slot_position(
        self, rotation: list[Track], exclusive: Track, slot: list[ScheduleEntry]
    ) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH, mode=MODE_HYBRID)

        program = select_program(config, rotation + [exclusive], slot, NOW)

        assert program.track.id == "x1"
        assert program.from_schedule is True
        assert program.track_index is None
        assert program.position_seconds == pytest.approx(200.0)

    def test_scheduled_mode_falls_back_to_rotation_outside_slots(
        self, rotation: list[Track], exclusive: Track
    ) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH, mode=MODE_SCHEDULED)

        program = select_program(config, rotation + [exclusive], [], NOW)

        assert program.from_schedule is False
        assert program.track_index is not None

    def test_played_exclusive_is_skipped_while_rotation_has_tracks(
        self, rotation: list[Track], exclusive: Track, slot: list[ScheduleEntry]
    ) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH, mode=MODE_HYBRID)

        program = select_program(
            config, rotation + [exclusive], slot, NOW, played_exclusives={"x1"}
        )

        assert program.from_schedule is False
        assert program.track.id != "x1"

    def test_played_exclusive_replays_when_rotation_is_empty(
        self, exclusive: Track, slot: list[ScheduleEntry]
    ) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH, mode=MODE_HYBRID)

        program = select_program(config, [exclusive], slot, NOW, played_exclusives={"x1"})

        assert program.track.id == "x1"

    def test_hidden_tracks_never_enter_rotation(self, exclusive: Track) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH, mode=MODE_ROTATION)

        assert select_program(config, [exclusive], [], NOW) is None

    def test_nothing_to_play(self) -> None:
        config = RadioConfig(is_live=True, loop_start_epoch=EPOCH)

        assert select_program(config, [], [], NOW) is None
