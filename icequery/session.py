"""Connection session: discovery retry loop and monitor login."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum

from .channel import Channel
from .cli_types import QueryArgs
from .discovery import Discovery, discover
from .exceptions import DiscoveryTimeoutError, LoginRejectedError, SchedulerConnectionError
from .utils import elapsed_ms

logger = logging.getLogger("icequery")

ConnectionProvider = Callable[[str, int, str | None, int], Discovery]


class SessionState(Enum):
    DISCOVERING = "discovering"
    CONNECTED = "connected"
    LOGGED_IN = "logged_in"
    POLLING = "polling"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


TERMINAL_STATES = frozenset({SessionState.FAILED, SessionState.TIMED_OUT})


class ConnectionSession:
    """Owns the channel from discovery until it is closed.

    Use as a context manager; the channel is closed on every exit path
    and a connection error escaping the block marks the session failed.

    Example:
        with ConnectionSession(args) as session:
            channel = session.open()
            records = IngestionLoop(session.start_polling(), args).run()
    """

    def __init__(
        self,
        args: QueryArgs,
        provider: ConnectionProvider = discover,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.args = args
        self.state = SessionState.DISCOVERING
        self.attempts = 0
        self._provider = provider
        self._clock = clock
        self._channel: Channel | None = None

    def __enter__(self) -> ConnectionSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if (
            exc_type is not None
            and issubclass(exc_type, SchedulerConnectionError)
            and self.state not in TERMINAL_STATES
        ):
            self.state = SessionState.FAILED
        self.close()

    def close(self) -> None:
        if self._channel is not None:
            self._channel.close()
            self._channel = None

    def open(self) -> Channel:
        """Discover the scheduler, switch to bulk transfer and log in.

        Raises:
            DiscoveryTimeoutError: No channel within the connect timeout
            LoginRejectedError: The login message could not be sent
        """
        channel = self._discover_channel()
        self._channel = channel
        self.state = SessionState.CONNECTED
        channel.enable_bulk_transfer()

        if not channel.send_login():
            self.state = SessionState.FAILED
            raise LoginRejectedError("Scheduler rejected login message.")
        self.state = SessionState.LOGGED_IN
        logger.debug("Logged in as monitor after %d attempt(s)", self.attempts)
        return channel

    def start_polling(self) -> Channel:
        """Hand the logged-in channel over to the ingestion loop."""
        if self.state is not SessionState.LOGGED_IN or self._channel is None:
            raise SchedulerConnectionError(f"Cannot poll in state {self.state.value}")
        self.state = SessionState.POLLING
        return self._channel

    def _discover_channel(self) -> Channel:
        args = self.args
        start = self._clock()
        discovery = self._provider(
            args.net_name, args.connect_timeout_ms, args.scheduler, args.port
        )
        channel = None
        try:
            # The provider's own timeout may be reported late; check it on
            # every pass and again after the loop.
            while not discovery.timed_out():
                self.attempts += 1
                channel = discovery.try_get_channel()
                if channel is not None:
                    break
                if elapsed_ms(start, self._clock) > args.connect_timeout_ms:
                    break
                logger.info("Retry no. %d...", self.attempts)
        finally:
            discovery.close()

        if channel is not None:
            return channel

        self.state = SessionState.TIMED_OUT
        if discovery.timed_out():
            raise DiscoveryTimeoutError(
                f"Timed out looking for a scheduler on network {args.net_name}."
            )
        raise DiscoveryTimeoutError(
            f"No scheduler connection within {args.connect_timeout_ms} ms."
        )
