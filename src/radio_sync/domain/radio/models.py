"""
Radio domain models.

Contains data structures for the shared broadcast config, schedule slots and
the computed on-air state.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from radio_sync.domain.library.models import Track

MODE_ROTATION = "rotation"
MODE_SCHEDULED = "scheduled"
MODE_HYBRID = "hybrid"
VALID_MODES = (MODE_ROTATION, MODE_SCHEDULED, MODE_HYBRID)


@dataclass(frozen=True)
class RadioConfig:
    """The singleton broadcast config shared by every listener.

    ``loop_start_epoch`` is the Unix timestamp the rotation started its first
    loop; it only moves when an admin goes live.
    """

    is_live: bool
    loop_start_epoch: Optional[int]
    mode: str = MODE_ROTATION


@dataclass(frozen=True)
class BroadcastState:
    """What the broadcast clock says is on air.

    Calculated deterministically from the rotation, epoch and current time.
    """

    track: Track
    track_index: int  # Index into the rotation
    position_in_track: float  # Seconds into the current track
    total_loop_duration: float


@dataclass(frozen=True)
class ScheduleEntry:
    """A time slot that puts a specific track on air.

    Used by the scheduled and hybrid modes.
    """

    id: str
    track_id: str
    day_of_week: Optional[int]  # 0 = Sunday .. 6 = Saturday, None = every day
    start_time: str  # "HH:MM"
    end_time: str  # "HH:MM"
    priority: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class Program:
    """What a listening session should be playing this tick."""

    track: Track
    position_seconds: float
    from_schedule: bool = False
    track_index: Optional[int] = None  # Rotation index, None for scheduled tracks


@dataclass(frozen=True)
class ExclusiveSlot:
    """A schedule slot that airs a hidden track, on air now or coming up."""

    track: Track
    entry: ScheduleEntry
    starts_at: datetime
    starts_in_seconds: float  # 0 while live
    is_live: bool
