"""Send client commands on the channel and mirror them into the event log."""

from __future__ import annotations

import copy
import json
import logging
import time
from typing import Any, Callable, Dict
from uuid import uuid4

from models.session_models import DisplayRecord, Origin, OutboundCommand
from services.realtime.channel import Channel
from services.realtime.errors import ChannelUnavailable
from services.realtime.event_log import EventLogStore

LOGGER = logging.getLogger(__name__)


def _new_event_id() -> str:
	return str(uuid4())


class CommandDispatcher:
	"""Assign identifiers, serialize, transmit and log outbound commands."""

	def __init__(
		self,
		channel: Channel,
		log_store: EventLogStore,
		clock: Callable[[], float] = time.time,
		id_factory: Callable[[], str] = _new_event_id,
	) -> None:
		self.channel = channel
		self.log_store = log_store
		self._clock = clock
		self._id_factory = id_factory

	def send(self, command: Dict[str, Any]) -> OutboundCommand:
		"""Transmit a command and append its client-origin record.

		The caller's dict is copied, never mutated. The record carries the time
		captured before transmission and the same ``event_id`` as the wire
		payload.

		Raises:
			ChannelUnavailable: If no channel is open; the log is left untouched.
			ValueError: If the command has no ``type``.
		"""
		if not self.channel.is_open:
			raise ChannelUnavailable("Cannot send command: no open channel.")
		body = copy.deepcopy(command)
		command_type = body.pop("type", None)
		if not isinstance(command_type, str) or not command_type:
			raise ValueError("Command 'type' is required.")
		event_id = body.pop("event_id", None) or self._id_factory()
		body.pop("timestamp", None)

		outbound = OutboundCommand(type=command_type, event_id=event_id, body=body, timestamp=self._clock())
		wire = outbound.to_wire()
		self.channel.send(json.dumps(wire))
		LOGGER.debug("Sent %s (%s)", command_type, event_id)

		self.log_store.append(
			DisplayRecord(
				type=command_type,
				event_id=event_id,
				timestamp=outbound.timestamp,
				origin=Origin.CLIENT,
				payload=wire,
			)
		)
		return outbound
