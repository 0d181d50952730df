"""
Track catalog queries.

Read side for the radio (active tracks in rotation order) plus the small
write surface the CLI uses to maintain the catalog.
"""

import uuid
from typing import Any, Optional

from loguru import logger

from radio_sync.core.db_adapter import get_radio_db_connection

from .models import Track, extract_youtube_id

# created_at/id make ties deterministic for every client reading the catalog
_ORDER_BY = "ORDER BY sort_order ASC, created_at ASC, id ASC"


def _row_to_track(row: Any) -> Track:
    """Convert database row to Track."""
    return Track(
        id=row["id"],
        title=row["title"],
        artist=row["artist"] or "",
        album=row["album"],
        duration_seconds=row["duration_seconds"],
        audio_url=row["audio_url"],
        youtube_url=row["youtube_url"],
        is_active=bool(row["is_active"]),
        is_hidden=bool(row["is_hidden"]),
        sort_order=row["sort_order"] or 0,
    )


def get_active_tracks() -> list[Track]:
    """Get all active tracks, hidden ones included, ordered by sort position.

    Returns:
        Active tracks in rotation order
    """
    with get_radio_db_connection() as conn:
        cursor = conn.execute(
            f"SELECT * FROM tracks WHERE is_active = ? {_ORDER_BY}",
            (True,),
        )
        return [_row_to_track(row) for row in cursor.fetchall()]


def get_rotation(tracks: list[Track]) -> list[Track]:
    """Build the rotation from catalog tracks.

    The rotation is every active, non-hidden track sorted by ``sort_order``.
    The sort is stable, so ties keep catalog order.

    Args:
        tracks: Catalog tracks (typically from get_active_tracks)

    Returns:
        Tracks in rotation order
    """
    return sorted(
        (t for t in tracks if t.is_active and not t.is_hidden),
        key=lambda t: t.sort_order,
    )


def get_track(track_id: str) -> Optional[Track]:
    """Get a track by ID.

    Args:
        track_id: Track ID

    Returns:
        Track or None if not found
    """
    with get_radio_db_connection() as conn:
        cursor = conn.execute("SELECT * FROM tracks WHERE id = ?", (track_id,))
        row = cursor.fetchone()
        return _row_to_track(row) if row else None


def add_track(
    title: str,
    artist: str = "",
    duration_seconds: Optional[float] = None,
    audio_url: Optional[str] = None,
    youtube_url: Optional[str] = None,
    sort_order: int = 0,
    is_hidden: bool = False,
    album: Optional[str] = None,
) -> Track:
    """Add a track to the catalog.

    Args:
        title: Track title
        artist: Artist name
        duration_seconds: Playback length in seconds
        audio_url: Path or URL for the native audio player
        youtube_url: YouTube link; routes playback through the embedded player
        sort_order: Rotation position
        is_hidden: Exclusive track, only playable through a schedule slot
        album: Optional album name

    Returns:
        The created Track

    Raises:
        ValueError: If the track has no playable source or the YouTube link
            can't be parsed
    """
    if not title.strip():
        raise ValueError("Track title must not be empty")
    if youtube_url and not extract_youtube_id(youtube_url):
        raise ValueError(f"Unrecognised YouTube URL: {youtube_url}")
    if not audio_url and not youtube_url:
        raise ValueError("Track needs an audio_url or a youtube_url")
    if duration_seconds is not None and duration_seconds < 0:
        raise ValueError(f"Duration must not be negative: {duration_seconds}")

    track_id = str(uuid.uuid4())
    with get_radio_db_connection() as conn:
        conn.execute(
            """
            INSERT INTO tracks (id, title, artist, album, duration_seconds, audio_url,
                                youtube_url, is_active, is_hidden, sort_order)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                track_id,
                title,
                artist,
                album,
                duration_seconds,
                audio_url,
                youtube_url,
                True,
                is_hidden,
                sort_order,
            ),
        )
        conn.commit()

    logger.info(f"Added track '{artist} - {title}' ({track_id})")
    return Track(
        id=track_id,
        title=title,
        artist=artist,
        album=album,
        duration_seconds=duration_seconds,
        audio_url=audio_url,
        youtube_url=youtube_url,
        is_active=True,
        is_hidden=is_hidden,
        sort_order=sort_order,
    )


def set_track_active(track_id: str, is_active: bool) -> bool:
    """Activate or deactivate a track.

    Listening sessions pick the change up on the next epoch reset.

    Returns:
        True if the track exists
    """
    with get_radio_db_connection() as conn:
        cursor = conn.execute(
            "UPDATE tracks SET is_active = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (is_active, track_id),
        )
        conn.commit()
        updated = cursor.rowcount > 0

    if updated:
        logger.info(f"Track {track_id} {'activated' if is_active else 'deactivated'}")
    return updated
