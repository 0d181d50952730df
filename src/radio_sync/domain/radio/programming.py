"""
Programming: decide what goes on air for a tick.

Combines the schedule (scheduled/hybrid modes) with the broadcast clock
rotation. Everything here is pure so every listener reaches the same answer.
"""

from datetime import datetime
from typing import AbstractSet, Optional

from radio_sync.domain.library.catalog import get_rotation
from radio_sync.domain.library.models import Track

from .clock import compute_state
from .models import MODE_ROTATION, Program, RadioConfig, ScheduleEntry
from .schedule import get_scheduled_track, get_slot_start


def _slot_position(track: Track, entry: ScheduleEntry, now: float) -> float:
    """Seconds into a scheduled track, measured from the slot start.

    The track repeats for the length of the slot when its duration is known.
    """
    moment = datetime.fromtimestamp(now)
    elapsed = max(0.0, now - get_slot_start(entry, moment).timestamp())
    if track.weight > 0:
        return elapsed % track.weight
    return elapsed


def select_program(
    config: RadioConfig,
    tracks: list[Track],
    schedule: list[ScheduleEntry],
    now: float,
    played_exclusives: AbstractSet[str] = frozenset(),
) -> Optional[Program]:
    """Select the track and offset a session should be playing at ``now``.

    Args:
        config: Shared broadcast config
        tracks: Catalog tracks, hidden ones included
        schedule: Active schedule entries
        now: Unix timestamp
        played_exclusives: Hidden track IDs this session already played

    Returns:
        Program, or None when there is nothing to play
    """
    rotation = get_rotation(tracks)

    if config.mode != MODE_ROTATION and schedule:
        scheduled = get_scheduled_track(schedule, tracks, datetime.fromtimestamp(now))
        if scheduled is not None:
            track, entry = scheduled
            # Exclusives play once per session while the rotation has an alternative
            already_heard = track.is_hidden and track.id in played_exclusives
            if not (already_heard and rotation):
                return Program(
                    track=track,
                    position_seconds=_slot_position(track, entry, now),
                    from_schedule=True,
                )

    state = compute_state(rotation, config.loop_start_epoch, now)
    if state is None:
        return None
    return Program(
        track=state.track,
        position_seconds=state.position_in_track,
        from_schedule=False,
        track_index=state.track_index,
    )
