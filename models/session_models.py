"""Session domain models for realtime transcription."""

from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Origin(str, Enum):
	"""Which side of the channel produced a record."""

	CLIENT = "client"
	SERVER = "server"


@dataclass
class DisplayRecord:
	"""One entry of the event log shown to the operator.

	Attributes:
		type: Event type, or ``transcription.live`` / ``transcription.completed``.
		event_id: Identifier of the event that produced the record.
		scope_id: Utterance or response the record belongs to (transcriptions only).
		text: Transcript text for transcription records.
		timestamp: Unix time the record was received or sent.
		is_transcription: True for live/completed transcript records.
		origin: Client for dispatched commands, server for inbound events.
		payload: Verbatim event for records logged as-is.
	"""

	type: str
	event_id: Optional[str] = None
	scope_id: Optional[str] = None
	text: Optional[str] = None
	timestamp: float = field(default_factory=lambda: time.time())
	is_transcription: bool = False
	origin: Origin = Origin.SERVER
	payload: Optional[Dict[str, Any]] = None

	@property
	def is_live(self) -> bool:
		return self.is_transcription and self.type == "transcription.live"

	def to_dict(self) -> Dict[str, Any]:
		return {
			"type": self.type,
			"event_id": self.event_id,
			"scope_id": self.scope_id,
			"text": self.text,
			"timestamp": self.timestamp,
			"is_transcription": self.is_transcription,
			"origin": self.origin.value,
			"payload": copy.deepcopy(self.payload),
		}


@dataclass
class SessionState:
	"""Connection-scoped flags; both reset on open and on close."""

	is_active: bool = False
	configured: bool = False

	def reset(self) -> None:
		self.is_active = False
		self.configured = False


@dataclass
class OutboundCommand:
	"""A client command after the dispatcher assigned its identifier."""

	type: str
	event_id: str
	body: Dict[str, Any]
	timestamp: float

	def to_wire(self) -> Dict[str, Any]:
		"""Return a fresh copy of the JSON payload sent on the channel."""
		payload = copy.deepcopy(self.body)
		payload["type"] = self.type
		payload["event_id"] = self.event_id
		return payload
