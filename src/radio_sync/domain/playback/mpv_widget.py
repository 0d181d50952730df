"""
mpv-backed embedded widget.

Behaves like a hosted YouTube player: takes video IDs, reports its state
asynchronously through events, and starts muted/paused when cued. A watcher
thread polls mpv and turns property changes into WidgetEvents.
"""

import threading
from typing import Callable, Optional

from loguru import logger

from radio_sync.core.config import PlayerConfig

from .embedded import WidgetEvent, WidgetEventHandler, WidgetState
from .exceptions import EmbeddedPlayerError
from .mpv import (
    get_mpv_property,
    is_mpv_running,
    send_mpv_command,
    set_mpv_property,
    start_mpv,
    stop_mpv,
)
from .stream_resolver import resolve_stream_url


class MpvEmbeddedWidget:
    """EmbeddedWidget implementation on top of a dedicated mpv process."""

    def __init__(
        self,
        config: PlayerConfig,
        resolver: Callable[[str], Optional[str]] = resolve_stream_url,
        poll_interval: float = 0.5,
    ) -> None:
        self._handle = start_mpv(config, "embedded", volume=0)
        if self._handle is None:
            raise EmbeddedPlayerError("Could not start mpv for the embedded player")

        self._resolver = resolver
        self._poll_interval = poll_interval
        self._handler: Optional[WidgetEventHandler] = None
        self._state = WidgetState.UNSTARTED
        self._has_media = False
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._watcher = threading.Thread(
            target=self._watch, name="embedded-widget", daemon=True
        )
        self._watcher.start()

    @property
    def _socket(self) -> str:
        return self._handle.socket_path

    def set_event_handler(self, handler: WidgetEventHandler) -> None:
        self._handler = handler
        self._emit(WidgetEvent(kind="ready"))

    def cue_or_load(self, video_id: str, start_seconds: float) -> None:
        stream_url = self._resolver(video_id)
        if not stream_url:
            self._emit(WidgetEvent(kind="error", message=f"Could not resolve {video_id}"))
            return

        set_mpv_property(self._socket, "pause", True)
        set_mpv_property(self._socket, "start", f"{max(0.0, start_seconds):.3f}")
        if not send_mpv_command(self._socket, {"command": ["loadfile", stream_url, "replace"]}):
            raise EmbeddedPlayerError(f"mpv refused to load {video_id}")

        with self._lock:
            self._has_media = True
        self._set_state(WidgetState.CUED)

    def seek_to(self, seconds: float) -> None:
        send_mpv_command(self._socket, {"command": ["seek", max(0.0, seconds), "absolute"]})

    def play(self) -> None:
        set_mpv_property(self._socket, "pause", False)

    def pause(self) -> None:
        set_mpv_property(self._socket, "pause", True)

    def stop(self) -> None:
        send_mpv_command(self._socket, {"command": ["stop"]})
        with self._lock:
            self._has_media = False
        self._set_state(WidgetState.UNSTARTED)

    def mute(self) -> None:
        set_mpv_property(self._socket, "mute", True)

    def unmute(self) -> None:
        set_mpv_property(self._socket, "mute", False)

    def set_volume(self, volume: int) -> None:
        set_mpv_property(self._socket, "volume", max(0, min(100, volume)))

    def get_current_time(self) -> float:
        position = get_mpv_property(self._socket, "time-pos")
        return float(position) if position is not None else 0.0

    def get_player_state(self) -> int:
        return int(self._state)

    def destroy(self) -> None:
        self._stop.set()
        stop_mpv(self._handle)

    def _watch(self) -> None:
        reported_dead = False
        while not self._stop.wait(self._poll_interval):
            if not is_mpv_running(self._handle):
                if not reported_dead:
                    reported_dead = True
                    self._emit(WidgetEvent(kind="error", message="mpv exited"))
                continue

            with self._lock:
                has_media = self._has_media
            if not has_media:
                continue

            state = self._observe_state()
            if state is not None:
                self._set_state(state)

    def _observe_state(self) -> Optional[WidgetState]:
        if get_mpv_property(self._socket, "eof-reached"):
            return WidgetState.ENDED
        if get_mpv_property(self._socket, "paused-for-cache"):
            return WidgetState.BUFFERING
        paused = get_mpv_property(self._socket, "pause")
        if paused is False:
            return WidgetState.PLAYING
        if paused is True and self._state not in (WidgetState.CUED, WidgetState.UNSTARTED):
            return WidgetState.PAUSED
        return None

    def _set_state(self, state: WidgetState) -> None:
        with self._lock:
            if state == self._state:
                return
            self._state = state
        self._emit(WidgetEvent(kind="state", state=state))

    def _emit(self, event: WidgetEvent) -> None:
        handler = self._handler
        if handler is None:
            return
        try:
            handler(event)
        except Exception:
            logger.exception(f"Embedded widget event handler failed for {event}")
