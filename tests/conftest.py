"""Shared fixtures for realtime transcription tests."""

import json
import itertools

import pytest

from services.realtime.channel import RelayChannel
from services.realtime.session_config import TranscriptionSettings
from services.realtime.transcription_session import TranscriptionSession


class FakeClock:
    """Monotonic clock advancing one second per call."""

    def __init__(self, start: float = 1000.0) -> None:
        self._ticks = itertools.count(start)

    def __call__(self) -> float:
        return float(next(self._ticks))


def wire(event_type: str, **fields) -> str:
    """Serialize a server event the way the data channel delivers it."""
    return json.dumps({"type": event_type, **fields})


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def channel():
    relay = RelayChannel()
    relay.open()
    return relay


@pytest.fixture
def make_session(clock):
    def factory(settings=None, channel=None):
        relay = channel or RelayChannel()
        relay.open()
        return TranscriptionSession("test-session", relay, settings=settings or TranscriptionSettings(), clock=clock)

    return factory


@pytest.fixture
def session(make_session):
    """An opened session with the handshake already sent."""
    opened = make_session()
    opened.on_open()
    return opened
