"""
Music library domain models.

Contains data structures for representing catalog tracks.
"""

import re
from typing import NamedTuple, Optional

# watch?v=, youtu.be/ and /embed/ links, or a bare video id
_YOUTUBE_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?(?:[^#]*&)?v=|youtu\.be/|youtube\.com/embed/)([A-Za-z0-9_-]{11})"),
    re.compile(r"^([A-Za-z0-9_-]{11})$"),
)


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    """Extract a YouTube video ID from the supported URL formats.

    Args:
        url: Watch/short/embed URL or a bare 11-character video ID

    Returns:
        The video ID, or None if the value isn't recognised
    """
    if not url:
        return None
    value = url.strip()
    for pattern in _YOUTUBE_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


class Track(NamedTuple):
    """Represents a catalog track.

    A track plays through the native audio player from ``audio_url`` unless
    it carries a YouTube reference, in which case it must be rendered by the
    embedded player.
    """

    id: str
    title: str
    artist: str = ""
    album: Optional[str] = None
    duration_seconds: Optional[float] = None  # None/0 = zero-weight rotation slot
    audio_url: Optional[str] = None
    youtube_url: Optional[str] = None
    is_active: bool = True
    is_hidden: bool = False  # Exclusive: schedule-only, never in rotation
    sort_order: int = 0

    @property
    def external_ref(self) -> Optional[str]:
        """Embedded-player reference (YouTube video ID), if any."""
        return extract_youtube_id(self.youtube_url)

    @property
    def weight(self) -> float:
        """Duration used by the broadcast clock; never negative."""
        if not self.duration_seconds or self.duration_seconds < 0:
            return 0.0
        return float(self.duration_seconds)
