"""Shared pytest fixtures for IceQuery tests."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from icequery.cli_types import QueryArgs
from icequery.protocol import EndMessage, Message, OtherMessage, StatsMessage

from fakes import stats_blob


@pytest.fixture(autouse=True)
def reset_icequery_logger() -> Generator[None, None, None]:
    """Keep CLI logging setup from leaking between tests."""
    logger = logging.getLogger("icequery")
    yield
    logger.setLevel(logging.NOTSET)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


@pytest.fixture
def query_args() -> QueryArgs:
    """Default query arguments with short timeouts."""
    return QueryArgs(connect_timeout_ms=500, receive_timeout_ms=50, color="never")


@pytest.fixture
def two_node_messages() -> list[Message]:
    """One offline 4-core node and one online 8-core node, plus noise."""
    return [
        StatsMessage(1, stats_blob("alpha", "10.0.0.1", 4, offline=True)),
        OtherMessage(84),
        StatsMessage(2, stats_blob("beta", "10.0.0.2", 8)),
    ]


@pytest.fixture
def end_message() -> EndMessage:
    return EndMessage()
