"""
Embedded player adapter.

Wraps a single long-lived embedded video/audio widget (asynchronous,
event-driven, expensive to create) behind a small command surface: load,
play/pause, seek, volume and mute.

Autoplay: hosts refuse audible playback the widget starts on its own, so
every load starts muted and the adapter only unmutes after the widget
reports PLAYING:

    LOADING -> AWAITING_PLAYING -> UNMUTED
"""

import threading
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Callable, Optional, Protocol

from loguru import logger


class WidgetState(IntEnum):
    """Player states reported by the widget."""

    UNSTARTED = -1
    ENDED = 0
    PLAYING = 1
    PAUSED = 2
    BUFFERING = 3
    CUED = 5


@dataclass(frozen=True)
class WidgetEvent:
    """An event emitted by the widget: 'ready', 'state' or 'error'."""

    kind: str
    state: Optional[WidgetState] = None
    message: Optional[str] = None


WidgetEventHandler = Callable[[WidgetEvent], None]


class EmbeddedWidget(Protocol):
    """Black-box embedded player as exposed by the hosting platform."""

    def cue_or_load(self, video_id: str, start_seconds: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def stop(self) -> None: ...

    def mute(self) -> None: ...

    def unmute(self) -> None: ...

    def set_volume(self, volume: int) -> None: ...  # 0-100

    def get_current_time(self) -> float: ...

    def get_player_state(self) -> int: ...

    def set_event_handler(self, handler: WidgetEventHandler) -> None: ...

    def destroy(self) -> None: ...


class UnmutePhase(str, Enum):
    """Where the current load is in the mute/unmute protocol."""

    IDLE = "idle"
    LOADING = "loading"
    AWAITING_PLAYING = "awaiting_playing"
    UNMUTED = "unmuted"


class ProgressTicker:
    """Invokes a callback every ``interval`` seconds on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self._callback = callback
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name="embedded-progress", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread = None

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("Progress callback failed")


class EmbeddedPlayerAdapter:
    """Stateful wrapper around one embedded widget for the session's lifetime.

    The widget is created once by ``open()`` and destroyed by ``close()``;
    it is never recreated per track. If construction fails the adapter stays
    unavailable for the rest of the session.

    Commands are fire-and-forget: a widget command that raises is logged and
    absorbed, and the next widget event or poll tick acts as the retry.
    """

    def __init__(
        self,
        widget_factory: Callable[[], EmbeddedWidget],
        volume: float = 0.8,
        muted: bool = False,
        progress_interval: float = 1.0,
        on_ended: Optional[Callable[[], None]] = None,
        on_progress: Optional[Callable[[float], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._widget_factory = widget_factory
        self._widget: Optional[EmbeddedWidget] = None
        self._failed = False
        self._volume = max(0.0, min(1.0, volume))
        self._muted = muted
        self._loaded_id: Optional[str] = None
        self._phase = UnmutePhase.IDLE
        self._reported_state = WidgetState.UNSTARTED
        self._play_pending = False
        self._lock = threading.RLock()
        self._ticker = ProgressTicker(progress_interval, self._emit_progress)
        self.on_ended = on_ended
        self.on_progress = on_progress
        self.on_error = on_error

    # === Lifecycle ===

    def open(self) -> bool:
        """Create the widget once. Returns False if it is unavailable."""
        with self._lock:
            if self._widget is not None:
                return True
            if self._failed:
                return False
            try:
                widget = self._widget_factory()
                widget.set_event_handler(self._handle_event)
            except Exception as e:
                self._failed = True
                message = f"Embedded player failed to initialize: {e}"
                logger.error(message)
            else:
                self._widget = widget
                logger.info("Embedded player created")
                return True
        self._notify_error(message)
        return False

    def close(self) -> None:
        """Destroy the widget and stop position tracking."""
        with self._lock:
            self._ticker.stop()
            widget, self._widget = self._widget, None
            self._loaded_id = None
            self._phase = UnmutePhase.IDLE
            self._reported_state = WidgetState.UNSTARTED
            self._play_pending = False
        if widget is not None:
            try:
                widget.destroy()
            except Exception as e:
                logger.warning(f"Embedded player destroy failed: {e}")
            logger.info("Embedded player destroyed")

    def __enter__(self) -> "EmbeddedPlayerAdapter":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # === State ===

    @property
    def available(self) -> bool:
        return self._widget is not None

    @property
    def loaded_id(self) -> Optional[str]:
        return self._loaded_id

    @property
    def phase(self) -> UnmutePhase:
        return self._phase

    @property
    def reported_state(self) -> WidgetState:
        return self._reported_state

    @property
    def is_playing(self) -> bool:
        return self._reported_state in (WidgetState.PLAYING, WidgetState.BUFFERING)

    @property
    def play_pending(self) -> bool:
        """A play was issued and the widget has neither confirmed nor refused it."""
        return self._play_pending

    @property
    def progress_tracking(self) -> bool:
        return self._ticker.running

    def current_time(self) -> Optional[float]:
        """Playback position, or None while not tracking (stale otherwise)."""
        with self._lock:
            if self._widget is None or not self._ticker.running:
                return None
            try:
                return float(self._widget.get_current_time())
            except Exception as e:
                logger.debug(f"Embedded player position unavailable: {e}")
                return None

    # === Commands ===

    def load(self, reference_id: str, start_at_seconds: float = 0.0) -> None:
        """Cue a video, muted. No-op if it's already the loaded one."""
        with self._lock:
            if self._widget is None:
                logger.debug("Embedded player unavailable, ignoring load")
                return
            if reference_id == self._loaded_id:
                return

            self._ticker.stop()
            self._phase = UnmutePhase.LOADING
            self._reported_state = WidgetState.UNSTARTED
            self._play_pending = False
            self._command("mute", self._widget.mute)
            self._command(
                "load", self._widget.cue_or_load, reference_id, max(0.0, start_at_seconds)
            )
            self._loaded_id = reference_id
            logger.debug(f"Embedded player loading {reference_id} at {start_at_seconds:.1f}s")

    def set_playing(self, playing: bool) -> None:
        """Play or pause, only if the widget's reported state disagrees."""
        with self._lock:
            if self._widget is None:
                return
            reported = self._query_state()
            if playing:
                if reported == WidgetState.PLAYING or self._loaded_id is None:
                    return
                if self._play_pending and reported not in (WidgetState.PAUSED, WidgetState.ENDED):
                    return
                # Set first: the widget may confirm PLAYING from inside play()
                self._play_pending = True
                if not self._command("play", self._widget.play):
                    self._play_pending = False
                elif self._phase == UnmutePhase.LOADING:
                    self._phase = UnmutePhase.AWAITING_PLAYING
            elif reported in (WidgetState.PLAYING, WidgetState.BUFFERING):
                self._command("pause", self._widget.pause)

    def seek(self, seconds: float) -> None:
        with self._lock:
            if self._widget is not None:
                self._command("seek", self._seek_widget, max(0.0, seconds))

    def stop(self) -> None:
        """Stop playback and forget the loaded video."""
        with self._lock:
            if self._widget is None:
                return
            self._ticker.stop()
            if self._loaded_id is not None or self.is_playing:
                self._command("stop", self._widget.stop)
            self._loaded_id = None
            self._phase = UnmutePhase.IDLE
            self._reported_state = WidgetState.UNSTARTED
            self._play_pending = False

    def set_volume(self, volume: float) -> None:
        """Set volume (0-1); applied now only if already unmuted."""
        with self._lock:
            self._volume = max(0.0, min(1.0, volume))
            if self._widget is not None and self._phase == UnmutePhase.UNMUTED:
                self._command("set_volume", self._widget.set_volume, self._volume_percent())

    def set_muted(self, muted: bool) -> None:
        """Mute or unmute; applied now only if already unmuted."""
        with self._lock:
            self._muted = muted
            if self._widget is None or self._phase != UnmutePhase.UNMUTED:
                return
            if muted:
                self._command("mute", self._widget.mute)
            else:
                self._command("set_volume", self._widget.set_volume, self._volume_percent())
                self._command("unmute", self._widget.unmute)

    # === Events ===

    def _handle_event(self, event: WidgetEvent) -> None:
        """Widget event callback; may run on the widget's own thread."""
        ended = False
        with self._lock:
            if event.kind == "error":
                logger.warning(f"Embedded player error: {event.message}")
            elif event.kind == "ready":
                logger.debug("Embedded player ready")
            elif event.kind == "state" and event.state is not None:
                ended = self._apply_state(event.state)

        if event.kind == "error":
            self._notify_error(event.message or "unknown error")
        if ended and self.on_ended is not None:
            try:
                self.on_ended()
            except Exception:
                logger.exception("on_ended callback failed")

    def _apply_state(self, state: WidgetState) -> bool:
        """Update from a reported state. Returns True on ENDED."""
        self._reported_state = state
        if state in (WidgetState.PLAYING, WidgetState.PAUSED, WidgetState.ENDED):
            self._play_pending = False
        if state == WidgetState.PLAYING:
            if self._phase in (UnmutePhase.LOADING, UnmutePhase.AWAITING_PLAYING):
                self._confirm_playing()
            self._ticker.start()
        elif state in (WidgetState.PAUSED, WidgetState.BUFFERING):
            self._ticker.stop()
        elif state == WidgetState.CUED:
            if self._phase == UnmutePhase.LOADING:
                self._phase = UnmutePhase.AWAITING_PLAYING
        elif state == WidgetState.ENDED:
            self._ticker.stop()
            return True
        return False

    def _confirm_playing(self) -> None:
        """Playback is confirmed: apply the requested volume and unmute."""
        self._command("set_volume", self._widget.set_volume, self._volume_percent())
        if not self._muted:
            self._command("unmute", self._widget.unmute)
        self._phase = UnmutePhase.UNMUTED
        logger.debug("Embedded playback confirmed, unmuted")

    # === Helpers ===

    def _seek_widget(self, seconds: float) -> None:
        # YouTube-style widgets have no dedicated seek in the protocol;
        # re-cue the loaded video at the new offset
        seek = getattr(self._widget, "seek_to", None)
        if seek is not None:
            seek(seconds)
        elif self._loaded_id is not None:
            self._widget.cue_or_load(self._loaded_id, seconds)

    def _query_state(self) -> WidgetState:
        try:
            self._reported_state = WidgetState(self._widget.get_player_state())
        except Exception as e:
            logger.debug(f"Embedded player state unavailable: {e}")
        return self._reported_state

    def _volume_percent(self) -> int:
        return int(round(self._volume * 100))

    def _command(self, name: str, func: Callable[..., Any], *args: Any) -> bool:
        try:
            func(*args)
            return True
        except Exception as e:
            logger.warning(f"Embedded player command '{name}' failed: {e}")
            return False

    def _emit_progress(self) -> None:
        position = self.current_time()
        if position is not None and self.on_progress is not None:
            self.on_progress(position)

    def _notify_error(self, message: str) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(message)
        except Exception:
            logger.exception("on_error callback failed")
