"""Playback exceptions."""


class PlaybackError(Exception):
    """Base exception for playback backends."""

    pass


class EmbeddedPlayerError(PlaybackError):
    """Raised when the embedded player widget cannot be created."""

    pass
