"""Message channel to the scheduler over a TCP socket."""

from __future__ import annotations

import logging
import select
import socket
from enum import Enum
from typing import Protocol

from .constants import RECV_CHUNK_SIZE
from .protocol import FrameBuffer, Message, decode_message, login_frame

logger = logging.getLogger("icequery")


class PollResult(Enum):
    READY = "ready"
    TIMEOUT = "timeout"
    ERROR = "error"


class Channel(Protocol):
    """What the session and ingestion loop need from a channel."""

    def enable_bulk_transfer(self) -> None: ...

    def send_login(self) -> bool: ...

    def poll_readable(self, timeout_ms: int) -> PollResult: ...

    def read_available(self) -> bool: ...

    def has_message(self) -> bool: ...

    def next_message(self) -> Message | None: ...

    def close(self) -> None: ...


class MsgChannel:
    """Framed message channel on a connected stream socket.

    The socket is switched to non-blocking mode; every wait goes through
    poll_readable() with an explicit bound.
    """

    def __init__(self, sock: socket.socket, *, send_timeout_ms: int = 2000):
        self._sock = sock
        self._frames = FrameBuffer()
        self._send_timeout_s = send_timeout_ms / 1000
        self._closed = False
        sock.setblocking(False)

    def __enter__(self) -> MsgChannel:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def fileno(self) -> int:
        return self._sock.fileno()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._sock.close()
        except OSError as e:
            logger.debug("Error closing channel: %s", e)

    def enable_bulk_transfer(self) -> None:
        """Let the kernel coalesce small writes (turn Nagle back on)."""
        try:
            self._sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 0)
        except OSError as e:
            logger.debug("Bulk transfer not supported on this socket: %s", e)

    def send_frame(self, frame: bytes) -> bool:
        """Send one frame within the send timeout. Returns False on failure."""
        try:
            self._sock.settimeout(self._send_timeout_s)
            self._sock.sendall(frame)
        except OSError as e:
            logger.debug("Send failed: %s", e)
            return False
        finally:
            if not self._closed:
                self._sock.setblocking(False)
        return True

    def send_login(self) -> bool:
        return self.send_frame(login_frame())

    def poll_readable(self, timeout_ms: int) -> PollResult:
        """Wait up to timeout_ms for data (or a buffered frame)."""
        if self._frames.has_frame():
            return PollResult.READY
        try:
            readable, _, _ = select.select([self._sock], [], [], timeout_ms / 1000)
        except (OSError, ValueError) as e:
            logger.debug("select() failed: %s", e)
            return PollResult.ERROR
        return PollResult.READY if readable else PollResult.TIMEOUT

    def read_available(self) -> bool:
        """Move everything the socket has into the frame buffer.

        Returns:
            False once the peer has closed the connection or it broke
        """
        while True:
            try:
                chunk = self._sock.recv(RECV_CHUNK_SIZE)
            except BlockingIOError:
                return True
            except OSError as e:
                logger.debug("recv() failed: %s", e)
                return False
            if not chunk:
                return False
            self._frames.feed(chunk)

    def has_message(self) -> bool:
        return self._frames.has_frame()

    def next_message(self) -> Message | None:
        body = self._frames.pop_frame()
        if body is None:
            return None
        return decode_message(body)
