"""
BullyWatch - Test Fixtures
==========================

Shared fixtures for all tests.
"""

import os
import tempfile

import pytest

# Keep test log files out of the working tree (logger is created at import)
os.environ.setdefault("BULLYWATCH_LOG_DIR", tempfile.mkdtemp(prefix="bullywatch-logs-"))

from bullywatch.core.config import TemporalConfig
from bullywatch.core.constants import MS_PER_MINUTE
from bullywatch.services.temporal import ChatMessage, TemporalAnalysisService
from bullywatch.services.temporal.models import MessageRecord

START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now

    def advance_minutes(self, minutes: float) -> int:
        return self.advance(int(minutes * MS_PER_MINUTE))


def make_message(msg_id, sender, text="", quoted_sender=None) -> ChatMessage:
    """Build a ChatMessage with short positional arguments."""
    return ChatMessage(id=str(msg_id), sender=sender, text=text, quoted_sender=quoted_sender)


def make_record(msg_id, sender, timestamp=START_MS, base_score=0, text="", quoted_sender=None) -> MessageRecord:
    """Build a stored MessageRecord for detector-level tests."""
    return MessageRecord(
        id=str(msg_id),
        sender=sender,
        timestamp=timestamp,
        base_score=base_score,
        text=text,
        quoted_sender=quoted_sender,
    )


@pytest.fixture
def clock():
    """Fresh fake clock per test."""
    return FakeClock()


@pytest.fixture
def config():
    """Default configuration, independent of the environment."""
    return TemporalConfig()


@pytest.fixture
def engine(config, clock):
    """Isolated engine wired to the fake clock."""
    return TemporalAnalysisService(config=config, clock=clock)
