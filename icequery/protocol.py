"""Scheduler wire format: message framing and decoding.

Every message on the channel is a big-endian uint32 length followed by a
body of that many bytes. The body starts with a uint32 message type.
Strings are a uint32 length (trailing NUL included) plus the bytes.

Only the message kinds a monitor consumes are decoded; anything else
becomes an OtherMessage carrying its type code.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Union

from .constants import M_END, M_MON_LOGIN, M_MON_STATS, MAX_FRAME_SIZE
from .exceptions import ProtocolError

_U32 = struct.Struct("!I")


@dataclass(frozen=True)
class StatsMessage:
    """Status update for one node."""

    host_id: int
    blob: str


@dataclass(frozen=True)
class EndMessage:
    """The scheduler is closing the session."""


@dataclass(frozen=True)
class OtherMessage:
    """A message kind the monitor does not use."""

    msg_type: int


Message = Union[StatsMessage, EndMessage, OtherMessage]


def encode_u32(value: int) -> bytes:
    return _U32.pack(value)


def encode_string(text: str) -> bytes:
    data = text.encode("utf-8") + b"\0"
    return _U32.pack(len(data)) + data


def encode_frame(msg_type: int, payload: bytes = b"") -> bytes:
    """Wrap a message type and payload into a length-prefixed frame."""
    body = _U32.pack(msg_type) + payload
    return _U32.pack(len(body)) + body


def login_frame() -> bytes:
    return encode_frame(M_MON_LOGIN)


def stats_frame(host_id: int, blob: str) -> bytes:
    return encode_frame(M_MON_STATS, encode_u32(host_id) + encode_string(blob))


def _read_u32(body: bytes, offset: int) -> tuple[int, int]:
    if offset + 4 > len(body):
        raise ProtocolError("Truncated message body")
    return _U32.unpack_from(body, offset)[0], offset + 4


def _read_string(body: bytes, offset: int) -> tuple[str, int]:
    length, offset = _read_u32(body, offset)
    if offset + length > len(body):
        raise ProtocolError("Truncated string in message body")
    raw = body[offset : offset + length]
    return raw.rstrip(b"\0").decode("utf-8", "replace"), offset + length


def decode_message(body: bytes) -> Message:
    """Decode one frame body into a message variant.

    Raises:
        ProtocolError: If the body is too short for its declared type
    """
    msg_type, offset = _read_u32(body, 0)
    if msg_type == M_MON_STATS:
        host_id, offset = _read_u32(body, offset)
        blob, _ = _read_string(body, offset)
        return StatsMessage(host_id=host_id, blob=blob)
    if msg_type == M_END:
        return EndMessage()
    return OtherMessage(msg_type=msg_type)


class FrameBuffer:
    """Accumulates received bytes and splits them into frame bodies."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def __len__(self) -> int:
        return len(self._buf)

    def feed(self, data: bytes) -> None:
        self._buf.extend(data)

    def has_frame(self) -> bool:
        if len(self._buf) < 4:
            return False
        (length,) = _U32.unpack_from(self._buf, 0)
        if length > MAX_FRAME_SIZE:
            raise ProtocolError(f"Frame of {length} bytes exceeds limit")
        return len(self._buf) >= 4 + length

    def pop_frame(self) -> bytes | None:
        """Remove and return the next complete frame body, if any."""
        if not self.has_frame():
            return None
        (length,) = _U32.unpack_from(self._buf, 0)
        body = bytes(self._buf[4 : 4 + length])
        del self._buf[: 4 + length]
        return body
