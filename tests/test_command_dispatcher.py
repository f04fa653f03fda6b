"""Unit tests for CommandDispatcher."""

import json

import pytest

from models.session_models import Origin
from services.realtime.channel import RelayChannel
from services.realtime.command_dispatcher import CommandDispatcher
from services.realtime.errors import ChannelUnavailable
from services.realtime.event_log import EventLogStore


@pytest.fixture
def log_store():
    return EventLogStore()


@pytest.fixture
def dispatcher(channel, log_store, clock):
    return CommandDispatcher(channel, log_store, clock=clock, id_factory=lambda: "generated-id")


def test_assigns_event_id_and_logs_with_same_id(dispatcher, channel, log_store):
    outbound = dispatcher.send({"type": "response.create"})

    sent = [json.loads(text) for text in channel.drain()]
    assert sent == [{"type": "response.create", "event_id": "generated-id"}]
    assert outbound.event_id == "generated-id"
    record = log_store.find("generated-id")
    assert record.origin is Origin.CLIENT
    assert record.timestamp == outbound.timestamp


def test_keeps_caller_event_id(dispatcher, channel):
    dispatcher.send({"type": "session.update", "event_id": "mine", "session": {}})
    assert json.loads(channel.drain()[0])["event_id"] == "mine"


def test_timestamp_not_sent_on_wire(dispatcher, channel):
    dispatcher.send({"type": "response.create", "timestamp": "12:00"})
    assert "timestamp" not in json.loads(channel.drain()[0])


def test_caller_dict_not_mutated(dispatcher, log_store):
    command = {"type": "session.update", "session": {"audio": {}}}
    dispatcher.send(command)
    assert command == {"type": "session.update", "session": {"audio": {}}}
    log_store.snapshot()[0].payload["session"]["audio"]["x"] = 1
    assert command["session"]["audio"] == {}


def test_closed_channel_raises_and_leaves_log_alone(log_store, clock):
    dispatcher = CommandDispatcher(RelayChannel(), log_store, clock=clock)
    with pytest.raises(ChannelUnavailable):
        dispatcher.send({"type": "response.create"})
    assert len(log_store) == 0
    assert log_store.version == 0


def test_missing_type_rejected(dispatcher, channel, log_store):
    with pytest.raises(ValueError):
        dispatcher.send({"session": {}})
    assert channel.drain() == []
    assert len(log_store) == 0
