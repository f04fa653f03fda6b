"""Message channel abstraction between the transcription core and transport."""

from __future__ import annotations

from typing import List

from services.realtime.errors import ChannelUnavailable


class Channel:
	"""Ordered, bidirectional text channel.

	Transports implement ``is_open`` and ``send``; inbound messages and
	open/close notifications are delivered to the session by the transport.
	"""

	@property
	def is_open(self) -> bool:
		raise NotImplementedError

	def send(self, text: str) -> None:
		"""Transmit one message or raise ChannelUnavailable."""
		raise NotImplementedError


class RelayChannel(Channel):
	"""Channel whose far end is a browser data channel reached over a websocket.

	Outbound messages are queued in an outbox that the websocket loop drains
	after each inbound frame, so ``send`` never blocks the event handler.
	"""

	def __init__(self) -> None:
		self._open = False
		self._outbox: List[str] = []

	@property
	def is_open(self) -> bool:
		return self._open

	def open(self) -> None:
		self._open = True

	def close(self) -> None:
		self._open = False
		self._outbox.clear()

	def send(self, text: str) -> None:
		if not self._open:
			raise ChannelUnavailable("No open data channel.")
		self._outbox.append(text)

	def drain(self) -> List[str]:
		"""Return queued outbound messages in send order and empty the outbox."""
		pending, self._outbox = self._outbox, []
		return pending
