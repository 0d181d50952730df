"""
Schedule management for the radio.

Time slots put a specific track on air in the scheduled and hybrid modes.
Slot matching is pure; the CRUD functions read and write the radio_schedule
table.
"""

import uuid
from datetime import datetime, time, timedelta
from typing import Any, Optional

from loguru import logger

from radio_sync.core.db_adapter import get_radio_db_connection
from radio_sync.domain.library.models import Track

from .models import ExclusiveSlot, ScheduleEntry

# update_schedule_entry: distinguishes "leave day_of_week alone" from None (every day)
UNCHANGED: Any = object()


def _row_to_schedule_entry(row: Any) -> ScheduleEntry:
    """Convert database row to ScheduleEntry dataclass."""
    return ScheduleEntry(
        id=row["id"],
        track_id=row["track_id"],
        day_of_week=row["day_of_week"],
        start_time=row["start_time"],
        end_time=row["end_time"],
        priority=row["priority"],
        is_active=bool(row["is_active"]),
    )


def _parse_time(time_str: str) -> time:
    """Parse "HH:MM" string to time object."""
    hour, minute = time_str.split(":")
    return time(int(hour), int(minute))


def _validate_time_format(time_str: str) -> None:
    """Validate time string is in HH:MM format."""
    try:
        parts = time_str.split(":")
        if len(parts) != 2:
            raise ValueError()
        hour, minute = int(parts[0]), int(parts[1])
        if not (0 <= hour <= 23 and 0 <= minute <= 59):
            raise ValueError()
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid time format: {time_str!r}. Use HH:MM (24-hour)")


def _validate_day_of_week(day_of_week: Optional[int]) -> None:
    if day_of_week is not None and not 0 <= day_of_week <= 6:
        raise ValueError(
            f"Invalid day_of_week: {day_of_week}. Use 0 (Sunday) .. 6 (Saturday)"
        )


def _day_index(moment: datetime) -> int:
    """Day of week with Sunday = 0."""
    return (moment.weekday() + 1) % 7


def time_in_slot(start: str, end: str, check_time: time) -> bool:
    """Check if a time falls within a slot, handling midnight wrap.

    A slot whose end is not after its start runs overnight; equal start and
    end cover the whole day.

    Examples:
        time_in_slot("08:00", "12:00", time(9, 30))  # True
        time_in_slot("22:00", "06:00", time(3, 0))   # True (overnight)
        time_in_slot("08:00", "12:00", time(12, 0))  # False (end is exclusive)
    """
    start_time = _parse_time(start)
    end_time = _parse_time(end)
    current = time(check_time.hour, check_time.minute)

    if end_time <= start_time:
        return current >= start_time or current < end_time
    return start_time <= current < end_time


def matches_schedule(entry: ScheduleEntry, now: datetime) -> bool:
    """Check if a schedule entry is on air at ``now``."""
    if not entry.is_active:
        return False
    if entry.day_of_week is not None and entry.day_of_week != _day_index(now):
        return False
    return time_in_slot(entry.start_time, entry.end_time, now.time())


def get_matching_entry(
    entries: list[ScheduleEntry],
    now: datetime,
) -> Optional[ScheduleEntry]:
    """Find the highest-priority entry on air at ``now``."""
    matching = [e for e in entries if matches_schedule(e, now)]
    if not matching:
        return None
    # Stable sort keeps list order among equal priorities
    return sorted(matching, key=lambda e: e.priority, reverse=True)[0]


def get_scheduled_track(
    entries: list[ScheduleEntry],
    tracks: list[Track],
    now: datetime,
) -> Optional[tuple[Track, ScheduleEntry]]:
    """Find the scheduled track for ``now``.

    Args:
        entries: Schedule entries
        tracks: Catalog tracks (hidden ones included)
        now: Local time to check

    Returns:
        (track, entry) for the highest-priority matching slot, or None if no
        slot matches or its track isn't in the catalog
    """
    entry = get_matching_entry(entries, now)
    if entry is None:
        return None
    for track in tracks:
        if track.id == entry.track_id:
            return track, entry
    logger.debug(f"Scheduled track {entry.track_id} not in catalog")
    return None


def get_slot_start(entry: ScheduleEntry, now: datetime) -> datetime:
    """Find when the slot that is on air at ``now`` started.

    For overnight slots checked after midnight, the slot started yesterday.
    """
    start_time = _parse_time(entry.start_time)
    slot_start = now.replace(
        hour=start_time.hour,
        minute=start_time.minute,
        second=0,
        microsecond=0,
    )
    if slot_start > now:
        slot_start -= timedelta(days=1)
    return slot_start


def _next_start(entry: ScheduleEntry, now: datetime) -> Optional[datetime]:
    """First start of ``entry`` strictly after ``now`` (within a week)."""
    start_time = _parse_time(entry.start_time)
    for offset in range(8):
        start = datetime.combine(now.date() + timedelta(days=offset), start_time)
        if start <= now:
            continue
        if entry.day_of_week is None or entry.day_of_week == _day_index(start):
            return start
    return None


def get_next_exclusive(
    entries: list[ScheduleEntry],
    tracks: list[Track],
    now: datetime,
) -> Optional[ExclusiveSlot]:
    """Find the exclusive (hidden track) slot on air now, or the next one.

    Args:
        entries: Schedule entries
        tracks: Catalog tracks (hidden ones included)
        now: Local time to check

    Returns:
        The live slot if one matches ``now`` (highest priority first),
        otherwise the soonest upcoming slot, or None if no active slot airs a
        hidden track
    """
    hidden = {t.id: t for t in tracks if t.is_hidden}
    candidates = [e for e in entries if e.is_active and e.track_id in hidden]

    for entry in sorted(candidates, key=lambda e: e.priority, reverse=True):
        if matches_schedule(entry, now):
            return ExclusiveSlot(
                track=hidden[entry.track_id],
                entry=entry,
                starts_at=get_slot_start(entry, now),
                starts_in_seconds=0.0,
                is_live=True,
            )

    best: Optional[tuple[datetime, ScheduleEntry]] = None
    for entry in candidates:
        start = _next_start(entry, now)
        if start is not None and (best is None or start < best[0]):
            best = (start, entry)
    if best is None:
        return None

    start, entry = best
    return ExclusiveSlot(
        track=hidden[entry.track_id],
        entry=entry,
        starts_at=start,
        starts_in_seconds=(start - now).total_seconds(),
        is_live=False,
    )


# === CRUD ===


def add_schedule_entry(
    track_id: str,
    start_time: str,
    end_time: str,
    day_of_week: Optional[int] = None,
    priority: int = 0,
) -> ScheduleEntry:
    """Add a schedule slot.

    Args:
        track_id: Track to put on air
        start_time: Start time in "HH:MM" format
        end_time: End time in "HH:MM" format
        day_of_week: 0 (Sunday) .. 6 (Saturday), or None for every day
        priority: Higher priority wins when slots overlap

    Returns:
        The created ScheduleEntry

    Raises:
        ValueError: If times or day are invalid, or the track doesn't exist
    """
    _validate_time_format(start_time)
    _validate_time_format(end_time)
    _validate_day_of_week(day_of_week)

    entry_id = str(uuid.uuid4())
    with get_radio_db_connection() as conn:
        cursor = conn.execute("SELECT 1 FROM tracks WHERE id = ?", (track_id,))
        if cursor.fetchone() is None:
            raise ValueError(f"Track not found: {track_id}")

        conn.execute(
            """
            INSERT INTO radio_schedule (id, track_id, day_of_week, start_time, end_time, priority, is_active)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (entry_id, track_id, day_of_week, start_time, end_time, priority, True),
        )
        conn.commit()

    logger.info(
        f"Added schedule entry {entry_id}: {start_time}-{end_time} -> track {track_id}"
    )
    return ScheduleEntry(
        id=entry_id,
        track_id=track_id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        priority=priority,
        is_active=True,
    )


def get_schedule_entries(active_only: bool = False) -> list[ScheduleEntry]:
    """Get schedule entries ordered by start time.

    Args:
        active_only: Only return active entries
    """
    query = "SELECT * FROM radio_schedule"
    params: tuple = ()
    if active_only:
        query += " WHERE is_active = ?"
        params = (True,)
    query += " ORDER BY start_time ASC, id ASC"

    with get_radio_db_connection() as conn:
        cursor = conn.execute(query, params)
        return [_row_to_schedule_entry(row) for row in cursor.fetchall()]


def get_schedule_entry(entry_id: str) -> Optional[ScheduleEntry]:
    """Get a specific schedule entry by ID."""
    with get_radio_db_connection() as conn:
        cursor = conn.execute(
            "SELECT * FROM radio_schedule WHERE id = ?",
            (entry_id,),
        )
        row = cursor.fetchone()
        return _row_to_schedule_entry(row) if row else None


def update_schedule_entry(
    entry_id: str,
    track_id: Optional[str] = None,
    start_time: Optional[str] = None,
    end_time: Optional[str] = None,
    day_of_week: Optional[int] = UNCHANGED,
    priority: Optional[int] = None,
    is_active: Optional[bool] = None,
) -> bool:
    """Update a schedule entry.

    Only the given fields change. Passing ``day_of_week=None`` turns the slot
    into an every-day slot.

    Returns:
        True if updated, False if entry not found

    Raises:
        ValueError: If times or day are invalid
    """
    if start_time is not None:
        _validate_time_format(start_time)
    if end_time is not None:
        _validate_time_format(end_time)
    if day_of_week is not UNCHANGED:
        _validate_day_of_week(day_of_week)

    fields = {
        "track_id": track_id,
        "start_time": start_time,
        "end_time": end_time,
        "priority": priority,
        "is_active": is_active,
    }
    updates = [f"{name} = ?" for name, value in fields.items() if value is not None]
    params: list[Any] = [value for value in fields.values() if value is not None]
    if day_of_week is not UNCHANGED:
        updates.append("day_of_week = ?")
        params.append(day_of_week)

    if not updates:
        return get_schedule_entry(entry_id) is not None

    updates.append("updated_at = CURRENT_TIMESTAMP")
    params.append(entry_id)

    with get_radio_db_connection() as conn:
        if track_id is not None:
            cursor = conn.execute("SELECT 1 FROM tracks WHERE id = ?", (track_id,))
            if cursor.fetchone() is None:
                raise ValueError(f"Track not found: {track_id}")

        cursor = conn.execute(
            f"UPDATE radio_schedule SET {', '.join(updates)} WHERE id = ?",
            tuple(params),
        )
        conn.commit()
        updated = cursor.rowcount > 0

    if updated:
        logger.info(f"Updated schedule entry {entry_id}")
    return updated


def delete_schedule_entry(entry_id: str) -> bool:
    """Delete a schedule entry.

    Returns:
        True if deleted, False if entry not found
    """
    with get_radio_db_connection() as conn:
        cursor = conn.execute(
            "DELETE FROM radio_schedule WHERE id = ?",
            (entry_id,),
        )
        conn.commit()
        deleted = cursor.rowcount > 0

    if deleted:
        logger.info(f"Deleted schedule entry {entry_id}")
    return deleted
