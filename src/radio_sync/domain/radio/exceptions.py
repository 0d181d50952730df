"""Radio-specific exceptions for error handling."""


class RadioError(Exception):
    """Base exception for radio operations."""

    pass


class RadioUnavailableError(RadioError):
    """Raised when the broadcast config or catalog can't be read."""

    pass


class NotAuthorizedError(RadioError):
    """Raised when a non-admin identity attempts an admin-only change."""

    pass
