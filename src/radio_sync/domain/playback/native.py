"""
Native audio player.

The session controller talks to the native player through the
NativeAudioPlayer protocol. MpvAudioPlayer is the concrete implementation
used by the CLI: it plays ``Track.audio_url`` through its own mpv process.
"""

import threading
from typing import Optional, Protocol

from loguru import logger

from radio_sync.core.config import PlayerConfig
from radio_sync.domain.library.models import Track

from .mpv import (
    MpvHandle,
    get_mpv_property,
    is_mpv_running,
    send_mpv_command,
    set_mpv_property,
    start_mpv,
    stop_mpv,
)


class NativeAudioPlayer(Protocol):
    """Control surface of a general-purpose audio-queue player."""

    def load_queue(self, tracks: list[Track]) -> None: ...

    def play(self, track: Track) -> None: ...

    def pause(self) -> None: ...

    def seek(self, seconds: float) -> None: ...

    @property
    def current_track(self) -> Optional[Track]: ...

    @property
    def is_playing(self) -> bool: ...


class MpvAudioPlayer:
    """NativeAudioPlayer backed by an mpv process over JSON IPC."""

    def __init__(self, config: PlayerConfig, volume: float = 0.8) -> None:
        self._config = config
        self._volume = volume
        self._handle: Optional[MpvHandle] = None
        self._queue: list[Track] = []
        self._current_track: Optional[Track] = None
        self._lock = threading.RLock()

    def open(self) -> bool:
        """Start the mpv process. Returns False if mpv isn't usable."""
        with self._lock:
            if is_mpv_running(self._handle):
                return True
            self._handle = start_mpv(
                self._config, "native", volume=int(self._volume * 100)
            )
            return self._handle is not None

    def close(self) -> None:
        """Stop the mpv process."""
        with self._lock:
            stop_mpv(self._handle)
            self._handle = None
            self._current_track = None

    @property
    def queue(self) -> list[Track]:
        return list(self._queue)

    def load_queue(self, tracks: list[Track]) -> None:
        with self._lock:
            self._queue = list(tracks)

    def play(self, track: Track) -> None:
        with self._lock:
            if not track.audio_url:
                logger.warning(f"Track {track.id} has no audio_url, cannot play natively")
                return
            if not is_mpv_running(self._handle) and not self.open():
                logger.warning("Native player unavailable, skipping play")
                return

            socket_path = self._handle.socket_path
            if send_mpv_command(
                socket_path, {"command": ["loadfile", track.audio_url, "replace"]}
            ):
                set_mpv_property(socket_path, "pause", False)
                self._current_track = track
                logger.debug(f"Native player loaded {track.audio_url}")
            else:
                logger.warning(f"Native player failed to load {track.audio_url}")

    def pause(self) -> None:
        with self._lock:
            if is_mpv_running(self._handle):
                set_mpv_property(self._handle.socket_path, "pause", True)

    def seek(self, seconds: float) -> None:
        with self._lock:
            if is_mpv_running(self._handle):
                send_mpv_command(
                    self._handle.socket_path,
                    {"command": ["seek", max(0.0, seconds), "absolute"]},
                )

    def set_volume(self, volume: float) -> None:
        with self._lock:
            self._volume = max(0.0, min(1.0, volume))
            if is_mpv_running(self._handle):
                set_mpv_property(
                    self._handle.socket_path, "volume", int(self._volume * 100)
                )

    @property
    def current_track(self) -> Optional[Track]:
        return self._current_track

    @property
    def is_playing(self) -> bool:
        with self._lock:
            if self._current_track is None or not is_mpv_running(self._handle):
                return False
            socket_path = self._handle.socket_path
            if get_mpv_property(socket_path, "eof-reached"):
                return False
            return get_mpv_property(socket_path, "pause") is False
