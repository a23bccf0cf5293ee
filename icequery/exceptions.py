"""IceQuery exception classes."""

from __future__ import annotations

from .constants import EXIT_ARGUMENTS, EXIT_CONNECTION, EXIT_NO_DATA, EXIT_SHAPING


class IceQueryError(RuntimeError):
    """Base exception for IceQuery errors.

    Every error carries the process exit code main() should use.
    """

    rc = EXIT_CONNECTION

    def __init__(self, message: str, rc: int | None = None):
        super().__init__(message)
        if rc is not None:
            self.rc = rc


class ArgumentError(IceQueryError):
    """Invalid command line input; shown to the user, never retried."""

    rc = EXIT_ARGUMENTS


class SchedulerConnectionError(IceQueryError):
    """Connecting to or talking with the scheduler failed."""

    rc = EXIT_CONNECTION


class DiscoveryTimeoutError(SchedulerConnectionError):
    """No scheduler channel was obtained within the connect timeout."""


class LoginRejectedError(SchedulerConnectionError):
    """The scheduler did not accept the monitor login message."""


class SchedulerQuitError(SchedulerConnectionError):
    """The scheduler ended the session."""


class ProtocolError(SchedulerConnectionError):
    """The channel violated the message framing contract."""


class NoUsableDataError(IceQueryError):
    """Nothing valid was received, or every record was filtered out."""

    rc = EXIT_NO_DATA


class ShapingProviderError(IceQueryError):
    """Text transliteration was requested but is not available."""

    rc = EXIT_SHAPING
