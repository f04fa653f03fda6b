"""Simple in-memory store for realtime transcription sessions."""

from __future__ import annotations

from typing import Dict, Optional
from uuid import uuid4

from services.realtime.channel import RelayChannel
from services.realtime.session_config import TranscriptionSettings
from services.realtime.transcription_session import TranscriptionSession


class SessionStore:
	"""Create, look up and discard transcription sessions."""

	def __init__(self, settings: Optional[TranscriptionSettings] = None) -> None:
		self.settings = settings or TranscriptionSettings()
		self._sessions: Dict[str, TranscriptionSession] = {}

	def __len__(self) -> int:
		return len(self._sessions)

	def create(self) -> TranscriptionSession:
		"""Create a new session bound to its own relay channel."""
		session_id = uuid4().hex
		session = TranscriptionSession(session_id, RelayChannel(), settings=self.settings)
		self._sessions[session_id] = session
		return session

	def get(self, session_id: str) -> TranscriptionSession:
		"""Return a session or raise KeyError if missing."""
		session = self._sessions.get(session_id)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		return session

	def discard(self, session_id: str) -> TranscriptionSession:
		"""Close a session's channel, reset its state and forget it."""
		session = self.get(session_id)
		if session.state.is_active:
			session.on_close()
		if isinstance(session.channel, RelayChannel):
			session.channel.close()
		del self._sessions[session_id]
		return session
