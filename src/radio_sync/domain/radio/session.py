"""
Radio session controller.

One RadioSession per listener. A poll thread calls ``tick()`` on a fixed
interval; each tick reads the shared broadcast config, asks the clock what is
on air and reconciles the local players with that answer. Sessions never talk
to each other: the radio_config record is the only thing they share.

Rules a tick follows:
- At most one backend produces audio once the tick returns.
- An unchanged track on a backend that is still playing it gets no commands.
- A resync snaps straight to the computed position, never catches up.
"""

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger

from radio_sync.domain.library.catalog import get_active_tracks, get_rotation
from radio_sync.domain.library.models import Track
from radio_sync.domain.playback.embedded import EmbeddedPlayerAdapter
from radio_sync.domain.playback.native import NativeAudioPlayer

from .models import Program, RadioConfig, ScheduleEntry
from .programming import select_program
from .schedule import get_schedule_entries
from .station import get_radio_config


class Backend(str, Enum):
    NONE = "none"
    NATIVE = "native"
    EMBEDDED = "embedded"


class SessionStatus(str, Enum):
    IDLE = "idle"
    PLAYING = "playing"
    UNAVAILABLE = "unavailable"


@dataclass
class SessionState:
    """Session-local player state. Never persisted or shared."""

    active_backend: Backend = Backend.NONE
    loaded_track_id: Optional[str] = None
    listening_enabled: bool = False
    status: SessionStatus = SessionStatus.IDLE
    played_exclusives: set[str] = field(default_factory=set)
    catalog_epoch: Optional[int] = None
    now_playing: Optional[Program] = None


def _active_schedule() -> list[ScheduleEntry]:
    return get_schedule_entries(active_only=True)


class RadioSession:
    """Keeps the local players in step with the shared broadcast clock."""

    def __init__(
        self,
        native: NativeAudioPlayer,
        embedded: EmbeddedPlayerAdapter,
        fetch_config: Callable[[], RadioConfig] = get_radio_config,
        fetch_tracks: Callable[[], list[Track]] = get_active_tracks,
        fetch_schedule: Callable[[], list[ScheduleEntry]] = _active_schedule,
        now_fn: Callable[[], float] = time.time,
        poll_interval: float = 5.0,
        seek_delay: float = 0.2,
    ) -> None:
        self._native = native
        self._embedded = embedded
        self._fetch_config = fetch_config
        self._fetch_tracks = fetch_tracks
        self._fetch_schedule = fetch_schedule
        self._now_fn = now_fn
        self.poll_interval = poll_interval
        self.seek_delay = seek_delay

        self.state = SessionState()
        self._tracks: list[Track] = []
        self._schedule: list[ScheduleEntry] = []
        self._catalog_loaded = False
        self._queue_loaded = False

        self._lock = threading.RLock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._pending_seek: Optional[threading.Timer] = None

        embedded.on_ended = self._on_embedded_ended

    # === Lifecycle ===

    def start(self) -> None:
        """Create the embedded player and start polling."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._embedded.open()
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._poll_loop, name="radio-session", daemon=True
            )
            self._thread.start()
        logger.info(f"Radio session started (poll every {self.poll_interval}s)")

    def close(self) -> None:
        """Stop polling, silence the players and destroy the embedded widget."""
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.poll_interval + 1.0)

        with self._lock:
            self._go_silent(SessionStatus.IDLE)
        self._embedded.close()
        logger.info("Radio session closed")

    def __enter__(self) -> "RadioSession":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _poll_loop(self) -> None:
        while not self._stop.is_set():
            self.tick()
            if self._stop.wait(self.poll_interval):
                break

    # === Listener controls ===

    def tune_in(self) -> None:
        with self._lock:
            self.state.listening_enabled = True
            logger.info("Tuned in")
            self.tick()

    def tune_out(self) -> None:
        with self._lock:
            self.state.listening_enabled = False
            logger.info("Tuned out")
            self.tick()

    @property
    def now_playing(self) -> Optional[Program]:
        return self.state.now_playing

    # === Reconciliation ===

    def tick(self) -> None:
        """Run one reconciliation pass. Never raises."""
        with self._lock:
            try:
                self._reconcile()
            except Exception:
                logger.exception("Radio tick failed")
                self._go_silent(SessionStatus.UNAVAILABLE)

    def _reconcile(self) -> None:
        try:
            config = self._fetch_config()
        except Exception as e:
            logger.warning(f"Radio config unavailable: {e}")
            self._go_silent(SessionStatus.UNAVAILABLE)
            return

        if not self.state.listening_enabled or not config.is_live:
            self._go_silent(SessionStatus.IDLE)
            return

        if not self._catalog_loaded or config.loop_start_epoch != self.state.catalog_epoch:
            if not self._load_catalog(config.loop_start_epoch):
                self._go_silent(SessionStatus.UNAVAILABLE)
                return

        if self._native_exclusive_finished():
            self.state.loaded_track_id = None

        program = self._select(config)
        if program is None:
            self._go_silent(SessionStatus.IDLE)
            return

        self._route(config, program)

    def _load_catalog(self, epoch: Optional[int]) -> bool:
        try:
            tracks = self._fetch_tracks()
            schedule = self._fetch_schedule()
        except Exception as e:
            logger.warning(f"Radio catalog unavailable: {e}")
            return False

        resync = self._catalog_loaded
        self._tracks = tracks
        self._schedule = schedule
        self._catalog_loaded = True
        self._queue_loaded = False
        self.state.catalog_epoch = epoch
        if resync:
            # New epoch: everyone restarts from the top, even mid-track
            logger.info(f"New loop start epoch {epoch}, resyncing")
            self.state.loaded_track_id = None
        logger.debug(f"Loaded {len(tracks)} tracks and {len(schedule)} schedule slots")
        return True

    def _select(self, config: RadioConfig) -> Optional[Program]:
        # The exclusive on air right now stays selectable until it's done
        excluded = self.state.played_exclusives - {self.state.loaded_track_id}
        return select_program(
            config, self._tracks, self._schedule, self._now_fn(), excluded
        )

    def _route(self, config: RadioConfig, program: Program) -> None:
        track = program.track
        ref = track.external_ref
        target = Backend.EMBEDDED if ref else Backend.NATIVE

        if target == Backend.EMBEDDED and not self._embedded.available:
            if not track.audio_url:
                logger.warning(f"Embedded player unavailable, cannot play '{track.title}'")
                self._go_silent(SessionStatus.UNAVAILABLE)
                return
            target = Backend.NATIVE

        if (
            track.id == self.state.loaded_track_id
            and target == self.state.active_backend
            and self._still_playing(target, track)
        ):
            self.state.now_playing = program
            self.state.status = SessionStatus.PLAYING
            return

        previous = self.state.active_backend
        self.state.active_backend = target
        self.state.loaded_track_id = track.id
        self.state.now_playing = program
        self.state.status = SessionStatus.PLAYING
        if track.is_hidden:
            self.state.played_exclusives.add(track.id)

        if target == Backend.NATIVE:
            self._play_native(config, track, previous)
        else:
            self._play_embedded(ref, program.position_seconds, previous)

        logger.info(
            f"On air: {track.title} - {track.artist or 'Unknown'} "
            f"@ {program.position_seconds:.1f}s ({target.value})"
        )

    def _still_playing(self, backend: Backend, track: Track) -> bool:
        if backend == Backend.NATIVE:
            current = self._native.current_track
            return current is not None and current.id == track.id and self._native.is_playing
        if self._embedded.loaded_id != track.external_ref:
            return False
        # An unconfirmed play counts until the widget reports PAUSED or ENDED
        return self._embedded.is_playing or self._embedded.play_pending

    def _play_native(self, config: RadioConfig, track: Track, previous: Backend) -> None:
        if previous == Backend.EMBEDDED:
            self._embedded.stop()
        self._cancel_pending_seek()

        if not self._queue_loaded:
            self._queue_loaded = self._call(
                "load_queue", self._native.load_queue, get_rotation(self._tracks)
            )
        self._call("play", self._native.play, track)

        # Seeking before playback starts is unreliable; seek shortly after
        if self.seek_delay <= 0:
            self._seek_native(config, track.id)
            return
        timer = threading.Timer(self.seek_delay, self._seek_native, args=(config, track.id))
        timer.daemon = True
        self._pending_seek = timer
        timer.start()

    def _seek_native(self, config: RadioConfig, track_id: str) -> None:
        with self._lock:
            self._pending_seek = None
            if (
                self.state.active_backend != Backend.NATIVE
                or self.state.loaded_track_id != track_id
            ):
                return
            try:
                program = self._select(config)
            except Exception:
                logger.exception("Could not recompute seek position")
                return
            if program is None or program.track.id != track_id:
                return
            self._call("seek", self._native.seek, program.position_seconds)

    def _play_embedded(self, ref: str, position: float, previous: Backend) -> None:
        if previous == Backend.NATIVE:
            self._call("pause", self._native.pause)
        self._cancel_pending_seek()

        already_loaded = self._embedded.loaded_id == ref
        self._embedded.load(ref, position)
        if already_loaded:
            self._embedded.seek(position)
        self._embedded.set_playing(True)

    def _native_exclusive_finished(self) -> bool:
        program = self.state.now_playing
        return (
            self.state.active_backend == Backend.NATIVE
            and program is not None
            and program.track.is_hidden
            and program.track.id == self.state.loaded_track_id
            and not self._native.is_playing
        )

    def _go_silent(self, status: SessionStatus) -> None:
        self._cancel_pending_seek()
        if self.state.active_backend == Backend.NATIVE:
            self._call("pause", self._native.pause)
        elif self.state.active_backend == Backend.EMBEDDED:
            self._embedded.stop()

        if self.state.active_backend != Backend.NONE:
            logger.info(f"Radio silent ({status.value})")
        self.state.active_backend = Backend.NONE
        self.state.loaded_track_id = None
        self.state.now_playing = None
        self.state.status = status

    def _cancel_pending_seek(self) -> None:
        if self._pending_seek is not None:
            self._pending_seek.cancel()
            self._pending_seek = None

    def _call(self, name: str, func: Callable[..., Any], *args: Any) -> bool:
        try:
            func(*args)
        except Exception as e:
            logger.warning(f"Native player command '{name}' failed: {e}")
            return False
        return True

    # === Embedded events ===

    def _on_embedded_ended(self) -> None:
        with self._lock:
            if self.state.active_backend != Backend.EMBEDDED:
                return
            logger.debug("Embedded track ended, re-polling")
            self.state.loaded_track_id = None
        self.tick()
