"""Tests for icequery/utils.py."""

from __future__ import annotations

import pytest
from icequery.utils import elapsed_ms, looks_like_host, pluralize

from fakes import FakeClock


class TestLooksLikeHost:
    """Tests for looks_like_host."""

    @pytest.mark.parametrize(
        "value",
        ["sched", "sched.example.com", "10.0.0.1", "fe80::1", "[::1]", "build-01"],
    )
    def test_valid(self, value: str):
        assert looks_like_host(value)

    @pytest.mark.parametrize("value", ["", "not a host", "-bad", "bad-", "a..b"])
    def test_invalid(self, value: str):
        assert not looks_like_host(value)


def test_elapsed_ms():
    clock = FakeClock(start=10.0)
    start = clock()
    clock.now = 10.25
    assert elapsed_ms(start, clock) == 250


def test_pluralize():
    assert pluralize(1, "node") == "1 node(s)"
    assert pluralize(0, "core") == "0 core(s)"
