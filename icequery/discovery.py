"""Finding the scheduler and opening a channel to it.

With an explicit address the scheduler is dialled directly. Otherwise a
one-byte probe is broadcast over UDP on the scheduler port; schedulers
answer with their protocol version byte followed by their NUL terminated
network name, and the first one on our network is used.
"""

from __future__ import annotations

import logging
import select
import socket
import struct
import time
from collections.abc import Callable
from typing import Protocol

from .channel import MsgChannel
from .constants import DISCOVERY_SLICE_MS, PROTOCOL_VERSION
from .exceptions import SchedulerConnectionError

logger = logging.getLogger("icequery")

_U32 = struct.Struct("!I")


class Discovery(Protocol):
    """A discovery attempt in progress."""

    def try_get_channel(self) -> MsgChannel | None: ...

    def timed_out(self) -> bool: ...

    def close(self) -> None: ...


def parse_discovery_reply(data: bytes) -> tuple[int, str] | None:
    """Split a broadcast reply into (protocol version, network name)."""
    if len(data) < 2:
        return None
    name = data[1:].split(b"\0", 1)[0].decode("utf-8", "replace")
    return data[0], name


def recv_exact(sock: socket.socket, size: int) -> bytes:
    """Read exactly size bytes from a socket with a timeout set."""
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            raise ConnectionError("connection closed during handshake")
        data += chunk
    return data


def negotiate_version(sock: socket.socket, local_version: int = PROTOCOL_VERSION) -> int:
    """Agree on a protocol version with the scheduler.

    Both sides announce their version; the client confirms the lower of
    the two and the scheduler echoes it back.

    Raises:
        ConnectionError: If the scheduler does not echo the agreed version
    """
    sock.sendall(_U32.pack(local_version))
    (remote_version,) = _U32.unpack(recv_exact(sock, 4))
    agreed = min(local_version, remote_version)
    sock.sendall(_U32.pack(agreed))
    (echoed,) = _U32.unpack(recv_exact(sock, 4))
    if echoed != agreed:
        raise ConnectionError(f"scheduler answered version {echoed}, expected {agreed}")
    return agreed


class SchedulerDiscovery:
    """Socket based discovery bounded by its own timeout.

    Each try_get_channel() call does at most one short bounded step
    (broadcast probe or connect attempt) and returns None if no channel
    is ready yet.
    """

    def __init__(
        self,
        net_name: str,
        timeout_ms: int,
        address: str | None,
        port: int,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.net_name = net_name
        self.port = port
        self._clock = clock
        self._deadline = clock() + timeout_ms / 1000
        self._slice_s = DISCOVERY_SLICE_MS / 1000
        self._target: tuple[str, int] | None = (address, port) if address else None
        self._udp: socket.socket | None = None

    def __enter__(self) -> SchedulerDiscovery:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def timed_out(self) -> bool:
        return self._clock() >= self._deadline

    def close(self) -> None:
        if self._udp is not None:
            self._udp.close()
            self._udp = None

    def try_get_channel(self) -> MsgChannel | None:
        if self.timed_out():
            return None
        if self._target is None:
            self._target = self._probe_broadcast()
            if self._target is None:
                return None
        return self._try_connect(self._target)

    def _open_broadcast_socket(self) -> socket.socket:
        """Raises SchedulerConnectionError if no broadcast socket can be set up."""
        udp = None
        try:
            udp = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
            udp.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            udp.setblocking(False)
        except OSError as e:
            if udp is not None:
                udp.close()
            raise SchedulerConnectionError(f"Cannot open broadcast socket: {e}") from e
        return udp

    def _probe_broadcast(self) -> tuple[str, int] | None:
        if self._udp is None:
            self._udp = self._open_broadcast_socket()
        try:
            self._udp.sendto(bytes([PROTOCOL_VERSION]), ("<broadcast>", self.port))
            readable, _, _ = select.select([self._udp], [], [], self._slice_s)
            if not readable:
                return None
            data, addr = self._udp.recvfrom(1024)
        except OSError as e:
            logger.debug("Broadcast probe failed: %s", e)
            return None

        reply = parse_discovery_reply(data)
        if reply is None:
            logger.debug("Ignoring malformed discovery reply from %s", addr[0])
            return None
        version, name = reply
        if name.lower() != self.net_name.lower():
            logger.debug("Ignoring scheduler %s on network %r", addr[0], name)
            return None
        logger.debug("Found scheduler %s (protocol %d)", addr[0], version)
        return addr[0], self.port

    def _wait_out_slice(self, started: float) -> None:
        """Keep a failed attempt from returning before its slice is used up."""
        now = self._clock()
        delay = min(started + self._slice_s, self._deadline) - now
        if delay > 0:
            time.sleep(delay)

    def _try_connect(self, target: tuple[str, int]) -> MsgChannel | None:
        started = self._clock()
        remaining = max(self._deadline - started, self._slice_s)
        try:
            sock = socket.create_connection(target, timeout=self._slice_s)
        except OSError as e:
            logger.debug("Connecting to %s:%d failed: %s", target[0], target[1], e)
            self._wait_out_slice(started)
            return None
        try:
            sock.settimeout(remaining)
            version = negotiate_version(sock)
        except OSError as e:
            logger.debug("Handshake with %s failed: %s", target[0], e)
            sock.close()
            self._wait_out_slice(started)
            return None
        logger.debug("Connected to %s:%d using protocol %d", target[0], target[1], version)
        return MsgChannel(sock)


def discover(
    net_name: str, timeout_ms: int, address: str | None, port: int
) -> SchedulerDiscovery:
    """Start discovering the scheduler for net_name."""
    return SchedulerDiscovery(net_name, timeout_ms, address, port)
