"""Tests for icequery/stats.py - stats blob parsing."""

from __future__ import annotations

import pytest
from icequery.stats import NodeRecord, parse_kv_lines, parse_stats

from fakes import stats_blob


class TestParseKvLines:
    """Tests for parse_kv_lines."""

    def test_first_colon_splits(self):
        """Only the first colon separates key and value."""
        assert parse_kv_lines("ip:fe80::1\n") == {"ip": "fe80::1"}

    def test_keys_lowercased(self):
        """Keys are case-insensitive."""
        assert parse_kv_lines("MaxJobs: 4") == {"maxjobs": "4"}

    def test_lines_without_colon_skipped(self):
        """Continuation lines without a colon are ignored."""
        assert parse_kv_lines("name: a\ngarbage\nip: b") == {"name": "a", "ip": "b"}

    def test_value_runs_to_end_of_blob(self):
        """A final line without newline still yields its value."""
        assert parse_kv_lines("platform:x86_64") == {"platform": "x86_64"}


class TestParseStats:
    """Tests for parse_stats."""

    def test_valid_blob(self):
        """A complete blob yields a record with defaults for optional flags."""
        blob = "name: alpha\nip: 10.0.0.1\nmaxjobs: 4\nplatform: x86_64\n"
        record = parse_stats(1, blob)
        assert record == NodeRecord(
            host_id=1,
            name="alpha",
            ip="10.0.0.1",
            platform="x86_64",
            max_jobs=4,
            no_remote=False,
            offline=False,
        )

    def test_missing_maxjobs(self):
        """Without maxjobs there is no record."""
        assert parse_stats(1, "name: alpha\nip: 10.0.0.1\nplatform: x86_64\n") is None

    @pytest.mark.parametrize("missing", ["name", "ip", "platform"])
    def test_missing_required_string(self, missing: str):
        """Each of name, ip and platform is required."""
        fields = {"name": "alpha", "ip": "10.0.0.1", "platform": "x86_64"}
        fields.pop(missing)
        blob = "".join(f"{k}:{v}\n" for k, v in fields.items()) + "maxjobs:4\n"
        assert parse_stats(1, blob) is None

    def test_empty_value_is_missing(self):
        """An empty value counts as missing."""
        assert parse_stats(1, stats_blob("")) is None

    @pytest.mark.parametrize("maxjobs", ["0", "-2", "four", ""])
    def test_bad_maxjobs(self, maxjobs: str):
        """Zero, negative or non-numeric maxjobs invalidates the record."""
        assert parse_stats(1, stats_blob("alpha", maxjobs=maxjobs)) is None

    def test_host_id_zero_rejected(self):
        """Host id 0 is invalid."""
        assert parse_stats(0, stats_blob("alpha")) is None

    def test_flags(self):
        """noremote and offline state are read case-insensitively."""
        record = parse_stats(3, stats_blob("gamma", noremote=True, offline=True))
        assert record is not None
        assert record.no_remote is True
        assert record.offline is True
        assert record.counts_towards_capacity is False

    def test_flag_values_must_match_exactly(self):
        """Only 'true' and 'offline' set the flags."""
        blob = "name:a\nip:b\nmaxjobs:2\nplatform:c\nnoremote:yes\nstate:down\n"
        record = parse_stats(5, blob)
        assert record is not None
        assert record.no_remote is False
        assert record.offline is False

    def test_unknown_keys_ignored(self):
        """Keys the monitor does not know are ignored."""
        blob = stats_blob("delta") + "Load:250\nSpeed:12.5\n"
        record = parse_stats(4, blob)
        assert record is not None
        assert record.name == "delta"

    def test_records_are_immutable(self):
        """Accepted records cannot be mutated."""
        record = parse_stats(1, stats_blob("alpha"))
        with pytest.raises(AttributeError):
            record.name = "other"  # type: ignore[misc]
