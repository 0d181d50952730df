"""
Deterministic broadcast clock.

The core algorithm that makes "tune in mid-stream" work: given the rotation
and the shared loop-start epoch, every listener calculates exactly which
track is on air and how far into it playback should be, without talking to
anyone else.
"""

from typing import Optional

from loguru import logger

from radio_sync.domain.library.models import Track

from .models import BroadcastState


def total_loop_duration(rotation: list[Track]) -> float:
    """Sum of track weights; zero-length tracks contribute nothing."""
    return sum(track.weight for track in rotation)


def compute_state(
    rotation: list[Track],
    loop_start_epoch: Optional[float],
    now: float,
) -> Optional[BroadcastState]:
    """Calculate what is on air at ``now``.

    The rotation repeats forever from ``loop_start_epoch``. Track boundaries
    are half-open: at the exact instant a track ends, the next one is on air
    at offset 0.

    Args:
        rotation: Tracks in rotation order
        loop_start_epoch: Unix timestamp the first loop started
        now: Unix timestamp to calculate for

    Returns:
        BroadcastState, or None when there is nothing to broadcast (empty
        rotation, zero total duration, missing or negative epoch)
    """
    if not rotation:
        return None

    total = total_loop_duration(rotation)
    if total <= 0:
        return None

    if loop_start_epoch is None or loop_start_epoch < 0:
        return None

    elapsed = max(0.0, now - loop_start_epoch)
    position_in_loop = elapsed % total

    # Walk through to find current track
    accumulated = 0.0
    for index, track in enumerate(rotation):
        weight = track.weight
        if accumulated + weight > position_in_loop:
            return BroadcastState(
                track=track,
                track_index=index,
                position_in_track=position_in_loop - accumulated,
                total_loop_duration=total,
            )
        accumulated += weight

    # Only reachable through float rounding at the very end of the loop
    logger.warning(f"Position calculation overflow ({position_in_loop}/{total})")
    index, track = next((i, t) for i, t in enumerate(rotation) if t.weight > 0)
    return BroadcastState(
        track=track,
        track_index=index,
        position_in_track=0.0,
        total_loop_duration=total,
    )


def get_upcoming(
    rotation: list[Track],
    state: BroadcastState,
    count: int = 5,
) -> list[Track]:
    """Get the tracks that follow the current one, in loop order.

    Zero-length tracks are skipped since they never go on air.

    Args:
        rotation: Tracks in rotation order
        state: Current broadcast state
        count: Maximum number of tracks to return

    Returns:
        Up to ``count`` upcoming tracks
    """
    playable = sum(1 for t in rotation if t.weight > 0)
    limit = min(count, max(playable - 1, 0))

    upcoming: list[Track] = []
    size = len(rotation)
    for offset in range(1, size):
        if len(upcoming) >= limit:
            break
        candidate = rotation[(state.track_index + offset) % size]
        if candidate.weight > 0:
            upcoming.append(candidate)
    return upcoming
