"""Normalized representation of inbound realtime events."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from services.realtime.errors import MalformedEvent


class EventCategory(str, Enum):
	LIFECYCLE = "lifecycle"
	BOUNDARY = "boundary"
	DELTA = "delta"
	COMPLETION = "completion"
	PASS_THROUGH = "pass_through"


@dataclass(frozen=True)
class ClassifiedEvent:
	"""An inbound event tagged with exactly one category.

	``scope_id`` is the canonical utterance identifier regardless of which
	field the protocol revision used for it. ``trigger`` names the boundary
	signal or the completion path that matched.
	"""

	category: EventCategory
	type: str
	raw: Dict[str, Any] = field(repr=False)
	event_id: Optional[str] = None
	scope_id: Optional[str] = None
	text: Optional[str] = None
	trigger: Optional[str] = None
	loggable: bool = False


def parse_raw_event(message: str) -> Dict[str, Any]:
	"""Decode one channel message into a raw event dict.

	Raises:
		MalformedEvent: If the text is not a JSON object with a string ``type``.
	"""
	try:
		payload = json.loads(message)
	except (TypeError, ValueError) as exc:
		raise MalformedEvent(f"Event is not valid JSON: {exc}") from exc
	if not isinstance(payload, dict):
		raise MalformedEvent("Event must be a JSON object.")
	event_type = payload.get("type")
	if not isinstance(event_type, str) or not event_type:
		raise MalformedEvent("Event is missing a string 'type'.")
	return payload
