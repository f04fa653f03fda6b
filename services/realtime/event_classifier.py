"""Route inbound realtime events to exactly one handling category.

Several revisions of the realtime protocol describe the same concepts with
different event names and scope fields. The classifier folds them into one
``ClassifiedEvent`` shape so downstream code never inspects revision details.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from services.realtime.events import ClassifiedEvent, EventCategory

LOGGER = logging.getLogger(__name__)

LIFECYCLE_PREFIXES = ("session.", "transcription_session.")
LIFECYCLE_TYPES = {"conversation.created"}

BOUNDARY_TYPES = {
	"input_audio_buffer.speech_started": "speech_started",
	"input_audio_buffer.committed": "committed",
	"response.created": "response_created",
}

DELTA_TYPES = {
	"conversation.item.input_audio_transcription.delta",
	"response.output_audio_transcript.delta",
	"response.audio_transcript.delta",
	"response.output_text.delta",
	"response.text.delta",
}

# completion type -> payload field holding the final text
COMPLETION_TYPES = {
	"conversation.item.input_audio_transcription.completed": "transcript",
	"response.output_audio_transcript.done": "transcript",
	"response.audio_transcript.done": "transcript",
	"response.output_text.done": "text",
	"response.text.done": "text",
}

CONVERSATION_ITEM_TYPES = {
	"conversation.item.created",
	"conversation.item.added",
	"conversation.item.done",
	"conversation.item.retrieved",
}

LOGGED_PASS_THROUGH_TYPES = {
	"error",
	"input_audio_buffer.speech_stopped",
	"input_audio_buffer.cleared",
	"input_audio_buffer.timeout_triggered",
	"conversation.item.input_audio_transcription.failed",
	"response.done",
	"rate_limits.updated",
	"response.function_call_arguments.delta",
}


def _non_empty_str(value: Any) -> Optional[str]:
	return value if isinstance(value, str) and value else None


def extract_scope_id(raw: Dict[str, Any]) -> Optional[str]:
	"""Return the utterance identifier under whichever name the event uses.

	Response events carry both ``response_id`` and the output ``item_id``;
	the response id is canonical for them so that ``response.created`` and
	the transcript deltas that follow share one scope.
	"""
	event_type = raw.get("type")
	if isinstance(event_type, str) and event_type.startswith("response."):
		order = ("response", "item")
	else:
		order = ("item", "response")
	for key in order:
		scope_id = _non_empty_str(raw.get(f"{key}_id"))
		if scope_id:
			return scope_id
	for key in order:
		nested = raw.get(key)
		if isinstance(nested, dict):
			scope_id = _non_empty_str(nested.get("id"))
			if scope_id:
				return scope_id
	return None


def extract_item_transcript(raw: Dict[str, Any]) -> Optional[str]:
	"""Return the transcript embedded in ``item.content[]``, if any."""
	item = raw.get("item")
	if not isinstance(item, dict):
		return None
	content = item.get("content")
	if not isinstance(content, list):
		return None
	parts = [
		block["transcript"]
		for block in content
		if isinstance(block, dict) and _non_empty_str(block.get("transcript"))
	]
	return "".join(parts) or None


class EventClassifier:
	"""Classify raw events into lifecycle, boundary, delta, completion or pass-through."""

	def classify(
		self,
		raw: Dict[str, Any],
		live_scopes: Iterable[str] = (),
		fallback_scope: Optional[str] = None,
	) -> ClassifiedEvent:
		"""Return the category and normalized fields for one raw event.

		Args:
			raw: Parsed event with a string ``type``.
			live_scopes: Scopes that currently have an accumulation buffer.
			fallback_scope: Scope to use for deltas/completions that carry none.
		"""
		event_type = raw["type"]
		event_id = _non_empty_str(raw.get("event_id"))
		scope_id = extract_scope_id(raw)

		def build(category: EventCategory, **kwargs: Any) -> ClassifiedEvent:
			return ClassifiedEvent(category=category, type=event_type, raw=raw, event_id=event_id, **kwargs)

		if event_type in LIFECYCLE_TYPES or event_type.startswith(LIFECYCLE_PREFIXES):
			return build(EventCategory.LIFECYCLE, loggable=True)

		if event_type in BOUNDARY_TYPES:
			return build(EventCategory.BOUNDARY, scope_id=scope_id, trigger=BOUNDARY_TYPES[event_type])

		delta = raw.get("delta")
		if isinstance(delta, str) and (
			event_type in DELTA_TYPES
			or (event_type.endswith(".delta") and "transcript" in event_type)
		):
			return build(EventCategory.DELTA, scope_id=scope_id or fallback_scope, text=delta)

		if event_type in COMPLETION_TYPES:
			text = raw.get(COMPLETION_TYPES[event_type])
			return build(
				EventCategory.COMPLETION,
				scope_id=scope_id or fallback_scope,
				text=text if isinstance(text, str) else None,
				trigger="completion_event",
			)

		if event_type in CONVERSATION_ITEM_TYPES:
			transcript = extract_item_transcript(raw)
			if transcript is not None and scope_id:
				return build(
					EventCategory.COMPLETION,
					scope_id=scope_id,
					text=transcript,
					trigger="conversation_item",
				)
			return build(EventCategory.PASS_THROUGH)

		transcript = raw.get("transcript")
		resolved_scope = scope_id or fallback_scope
		if isinstance(transcript, str) and resolved_scope and resolved_scope in set(live_scopes):
			LOGGER.debug("Treating %s as completion for live scope %s", event_type, resolved_scope)
			return build(
				EventCategory.COMPLETION,
				scope_id=resolved_scope,
				text=transcript,
				trigger="payload_shape",
			)

		return build(EventCategory.PASS_THROUGH, loggable=event_type in LOGGED_PASS_THROUGH_TYPES)
