"""Error types raised by the realtime transcription core."""

from __future__ import annotations


class RealtimeError(Exception):
	"""Base class for realtime transcription errors."""


class MalformedEvent(RealtimeError):
	"""An inbound message could not be parsed into an event."""


class ChannelUnavailable(RealtimeError):
	"""A command was sent while no channel was open."""


class DuplicateCompletion(RealtimeError):
	"""A completion arrived for a scope that was already finalized."""

	def __init__(self, scope_id: str) -> None:
		super().__init__(f"Scope {scope_id} already finalized")
		self.scope_id = scope_id
