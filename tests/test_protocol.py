"""Tests for icequery/protocol.py - framing and message decoding."""

from __future__ import annotations

import struct

import pytest
from icequery.constants import M_END, M_MON_LOGIN, M_MON_STATS, MAX_FRAME_SIZE
from icequery.exceptions import ProtocolError
from icequery.protocol import (
    EndMessage,
    FrameBuffer,
    OtherMessage,
    StatsMessage,
    decode_message,
    encode_frame,
    encode_string,
    login_frame,
    stats_frame,
)


class TestEncoding:
    """Tests for frame and string encoding."""

    def test_string_includes_nul(self):
        assert encode_string("ab") == b"\x00\x00\x00\x03ab\x00"

    def test_login_frame_is_type_only(self):
        assert login_frame() == struct.pack("!II", 4, M_MON_LOGIN)

    def test_frame_length_covers_type_and_payload(self):
        frame = encode_frame(99, b"xyz")
        assert frame == struct.pack("!II", 7, 99) + b"xyz"


class TestDecodeMessage:
    """Tests for decode_message."""

    def test_stats(self):
        body = stats_frame(12, "Name:alpha\n")[4:]
        assert decode_message(body) == StatsMessage(host_id=12, blob="Name:alpha\n")

    def test_end(self):
        assert decode_message(struct.pack("!I", M_END)) == EndMessage()

    def test_other(self):
        assert decode_message(struct.pack("!I", 84) + b"junk") == OtherMessage(84)

    def test_truncated_stats(self):
        with pytest.raises(ProtocolError):
            decode_message(struct.pack("!II", M_MON_STATS, 1) + struct.pack("!I", 50) + b"ab")

    def test_empty_body(self):
        with pytest.raises(ProtocolError):
            decode_message(b"")

    def test_invalid_utf8_is_replaced(self):
        body = struct.pack("!II", M_MON_STATS, 3) + struct.pack("!I", 3) + b"\xff\xfe\x00"
        message = decode_message(body)
        assert isinstance(message, StatsMessage)
        assert "�" in message.blob


class TestFrameBuffer:
    """Tests for FrameBuffer."""

    def test_partial_frame_waits(self):
        frame = stats_frame(1, "Name:a\n")
        buf = FrameBuffer()
        buf.feed(frame[:5])
        assert not buf.has_frame()
        assert buf.pop_frame() is None
        buf.feed(frame[5:])
        assert buf.has_frame()
        assert buf.pop_frame() == frame[4:]
        assert len(buf) == 0

    def test_multiple_frames_in_one_chunk(self):
        buf = FrameBuffer()
        buf.feed(stats_frame(1, "a") + encode_frame(M_END))
        assert decode_message(buf.pop_frame()) == StatsMessage(1, "a")
        assert decode_message(buf.pop_frame()) == EndMessage()
        assert buf.pop_frame() is None

    def test_oversized_frame_rejected(self):
        buf = FrameBuffer()
        buf.feed(struct.pack("!I", MAX_FRAME_SIZE + 1))
        with pytest.raises(ProtocolError):
            buf.has_frame()
