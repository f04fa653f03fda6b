"""Dispatch relay websocket frames to a transcription session."""
from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import WebSocket

from services.realtime.channel import RelayChannel
from services.realtime.transcription_session import TranscriptionSession


class RealtimeRelayHandler:
	"""Bridge one browser data channel, relayed over a websocket, to a session."""

	def __init__(self, session: TranscriptionSession) -> None:
		if not isinstance(session.channel, RelayChannel):
			raise TypeError("Relay handler requires a session bound to a RelayChannel.")
		self.session = session
		self.channel: RelayChannel = session.channel
		self._sent_version = session.log_store.version

	async def handle(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		"""Process a single inbound relay frame, then flush outbound traffic."""
		message_type = payload.get("type")
		try:
			if message_type == "channel.open":
				self.channel.open()
				self.session.on_open()
			elif message_type == "channel.message":
				self.session.on_message(self._message_text(payload))
			elif message_type == "channel.close":
				self.close()
			elif message_type == "command":
				command = payload.get("command")
				if not isinstance(command, dict):
					raise ValueError("Command payload must be an object.")
				self.session.send_command(command)
			else:
				raise ValueError("Unsupported message type.")
		except Exception as exc:
			await self._send(websocket, {"type": "error", "detail": str(exc)})
		await self.flush(websocket)

	def close(self) -> None:
		"""Treat the browser's channel as closed and reset the session."""
		self.session.on_close()
		self.channel.close()

	async def flush(self, websocket: WebSocket) -> None:
		"""Forward queued commands and push a log snapshot if the log changed."""
		for text in self.channel.drain():
			await self._send(websocket, {"type": "channel.send", "data": text})
		version = self.session.log_store.version
		if version != self._sent_version:
			self._sent_version = version
			await self._send(
				websocket,
				{
					"type": "log.snapshot",
					"records": [record.to_dict() for record in self.session.get_visible_log()],
					"transcript": self.session.get_current_transcript(),
				},
			)

	@staticmethod
	def _message_text(payload: Dict[str, Any]) -> str:
		data = payload.get("data")
		# some clients forward the already-parsed event object
		if isinstance(data, dict):
			return json.dumps(data)
		if not isinstance(data, str):
			raise ValueError("Channel message 'data' must be a string.")
		return data

	async def _send(self, websocket: WebSocket, payload: Dict[str, Any]) -> None:
		await websocket.send_text(json.dumps(payload))
