"""Library domain - the track catalog the radio reads from.

This domain handles:
- Track model and embedded-player reference extraction
- Catalog queries (active tracks in rotation order)
- Catalog maintenance used by the CLI
"""

from .models import Track, extract_youtube_id
from .catalog import (
    add_track,
    get_active_tracks,
    get_rotation,
    get_track,
    set_track_active,
)

__all__ = [
    "Track",
    "extract_youtube_id",
    "add_track",
    "get_active_tracks",
    "get_rotation",
    "get_track",
    "set_track_active",
]
