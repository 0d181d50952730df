"""Playback domain - the two audio backends a listening session drives.

This domain handles:
- Native audio-queue playback (mpv over JSON IPC)
- The embedded player adapter and its mute/unmute autoplay protocol
- Stream URL resolution for embedded references
"""

from .embedded import (
    EmbeddedPlayerAdapter,
    EmbeddedWidget,
    UnmutePhase,
    WidgetEvent,
    WidgetState,
)
from .exceptions import EmbeddedPlayerError, PlaybackError
from .native import MpvAudioPlayer, NativeAudioPlayer

__all__ = [
    "EmbeddedPlayerAdapter",
    "EmbeddedWidget",
    "UnmutePhase",
    "WidgetEvent",
    "WidgetState",
    "EmbeddedPlayerError",
    "PlaybackError",
    "MpvAudioPlayer",
    "NativeAudioPlayer",
]
