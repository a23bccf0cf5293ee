"""Message ingestion: poll the channel and collect node records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .channel import Channel, PollResult
from .cli_types import QueryArgs
from .constants import MAX_USELESS_POLLS
from .exceptions import ProtocolError, SchedulerConnectionError, SchedulerQuitError
from .protocol import EndMessage, Message, StatsMessage
from .stats import NodeRecord, parse_stats

logger = logging.getLogger("icequery")


@dataclass
class IngestResult:
    """What one ingestion run collected."""

    records: list[NodeRecord] = field(default_factory=list)
    polls: int = 0
    messages: int = 0
    timed_out: bool = False


class IngestionLoop:
    """Drains scheduler messages until the stream stops being useful.

    Termination: ingestion stops when a poll wait times out, or after
    max_useless_polls consecutive polls accepted no new record. A record
    is accepted only if its host id is above every host id accepted so
    far; the scheduler hands out host ids in increasing order, so a lower
    or repeated id is a later sample of a node we already have.
    """

    def __init__(
        self,
        channel: Channel,
        args: QueryArgs,
        *,
        max_useless_polls: int = MAX_USELESS_POLLS,
    ):
        self.channel = channel
        self.receive_timeout_ms = args.receive_timeout_ms
        self.max_useless_polls = max_useless_polls
        self.high_water = 0
        self.result = IngestResult()

    def run(self) -> IngestResult:
        """Poll until done.

        Raises:
            SchedulerQuitError: The scheduler sent an end-of-session message
            SchedulerConnectionError: The poll wait or the connection failed
            ProtocolError: A message was announced but could not be read
        """
        useless = 0
        while useless < self.max_useless_polls:
            status = self.channel.poll_readable(self.receive_timeout_ms)
            if status is PollResult.ERROR:
                raise SchedulerConnectionError("Error occurred while polling the scheduler.")
            if status is PollResult.TIMEOUT:
                if self.result.messages == 0:
                    logger.info("No data received within %d ms.", self.receive_timeout_ms)
                else:
                    logger.debug("Poll timed out, stream is idle")
                self.result.timed_out = True
                break

            self.result.polls += 1
            if self.drain():
                useless = 0
            else:
                useless += 1
                logger.debug("Useless poll %d/%d", useless, self.max_useless_polls)
        return self.result

    def drain(self) -> bool:
        """Handle every complete message available now.

        Returns:
            True if at least one new record was accepted
        """
        still_open = self.channel.read_available()
        useful = False
        while self.channel.has_message():
            message = self.channel.next_message()
            if message is None:
                raise ProtocolError("Channel announced a message but none could be read.")
            self.result.messages += 1
            if self.handle(message):
                useful = True
        if not still_open:
            raise SchedulerConnectionError(
                "No message received, connection might be broken."
            )
        return useful

    def handle(self, message: Message) -> bool:
        """Process one message; True if it produced an accepted record."""
        if isinstance(message, EndMessage):
            raise SchedulerQuitError("Scheduler has quit.")
        if isinstance(message, StatsMessage):
            return self.accept(message)
        logger.debug("Ignoring message type %d", message.msg_type)
        return False

    def accept(self, message: StatsMessage) -> bool:
        record = parse_stats(message.host_id, message.blob)
        if record is None:
            return False
        if record.host_id <= self.high_water:
            logger.debug(
                "Ignoring stats for host %d (already have up to %d)",
                record.host_id,
                self.high_water,
            )
            return False
        self.high_water = record.host_id
        self.result.records.append(record)
        logger.debug("Accepted node %d (%s)", record.host_id, record.name)
        return True
