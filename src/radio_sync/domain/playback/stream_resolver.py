"""Stream URL resolution for YouTube-backed tracks using yt-dlp.

Turns a video ID into a direct audio stream URL mpv can open. Stream URLs
expire, so results are cached briefly.
"""

from time import time
from typing import Optional

import yt_dlp
from loguru import logger

# video_id -> (stream_url, expires_at)
_stream_cache: dict[str, tuple[str, float]] = {}
CACHE_TTL_SECONDS = 600


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"


def _pick_stream_url(info: dict) -> Optional[str]:
    stream_url = info.get("url")
    if stream_url:
        return stream_url

    formats = info.get("formats") or []
    audio_formats = [f for f in formats if f.get("acodec") not in (None, "none")]
    if audio_formats:
        return audio_formats[-1].get("url")
    if formats:
        return formats[-1].get("url")
    return None


def resolve_stream_url(video_id: str) -> Optional[str]:
    """Resolve a YouTube video ID to a playable stream URL.

    Args:
        video_id: 11-character YouTube video ID

    Returns:
        Direct stream URL or None if resolution fails
    """
    if not video_id:
        return None

    cached = _stream_cache.get(video_id)
    if cached is not None:
        stream_url, expires_at = cached
        if time() < expires_at:
            logger.debug(f"Stream URL cache hit for {video_id}")
            return stream_url
        del _stream_cache[video_id]

    ydl_opts = {
        "quiet": True,
        "no_warnings": True,
        "format": "bestaudio/best",
        "skip_download": True,
        "noplaylist": True,
    }

    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(watch_url(video_id), download=False)
    except yt_dlp.utils.DownloadError as e:
        logger.warning(f"yt-dlp download error for {video_id}: {e}")
        return None

    if not info:
        logger.warning(f"yt-dlp returned no info for {video_id}")
        return None

    stream_url = _pick_stream_url(info)
    if not stream_url:
        logger.warning(f"No stream URL found in yt-dlp response for {video_id}")
        return None

    _stream_cache[video_id] = (stream_url, time() + CACHE_TTL_SECONDS)
    logger.debug(f"Resolved stream URL for {video_id}")
    return stream_url


def clear_stream_cache() -> None:
    """Clear the stream URL cache."""
    _stream_cache.clear()


def prune_expired_cache() -> int:
    """Remove expired entries from cache.

    Returns:
        Number of entries removed
    """
    now = time()
    expired_keys = [k for k, (_, exp) in _stream_cache.items() if exp <= now]
    for key in expired_keys:
        del _stream_cache[key]

    if expired_keys:
        logger.debug(f"Pruned {len(expired_keys)} expired stream URL cache entries")
    return len(expired_keys)
