"""Accumulate transcript deltas per utterance and emit display records."""

from __future__ import annotations

import time
from typing import Callable, Dict, List, Optional, Set

from models.session_models import DisplayRecord, Origin
from services.realtime.errors import DuplicateCompletion

LIVE_TYPE = "transcription.live"
COMPLETED_TYPE = "transcription.completed"


class TranscriptionAggregator:
	"""Track one text buffer per scope through absent -> accumulating -> finalized."""

	def __init__(self, clock: Callable[[], float] = time.time) -> None:
		self._clock = clock
		self._buffers: Dict[str, str] = {}
		self._finalized: Set[str] = set()

	def live_scopes(self) -> List[str]:
		"""Return scopes with an open buffer, oldest first."""
		return list(self._buffers)

	def buffer_text(self, scope_id: str) -> Optional[str]:
		return self._buffers.get(scope_id)

	def is_finalized(self, scope_id: str) -> bool:
		return scope_id in self._finalized

	def begin(self, scope_id: str) -> bool:
		"""Allocate an empty buffer for a new utterance.

		Returns False when the scope is already live or finalized; an existing
		buffer is never truncated by a repeated boundary for the same scope.
		"""
		if scope_id in self._finalized or scope_id in self._buffers:
			return False
		self._buffers[scope_id] = ""
		return True

	def apply_delta(self, scope_id: str, delta: str, event_id: Optional[str] = None) -> Optional[DisplayRecord]:
		"""Append a fragment and return the superseding live record.

		Deltas arriving after the scope was finalized are ignored.
		"""
		if scope_id in self._finalized:
			return None
		text = self._buffers.get(scope_id, "") + delta
		self._buffers[scope_id] = text
		return DisplayRecord(
			type=LIVE_TYPE,
			event_id=event_id,
			scope_id=scope_id,
			text=text,
			timestamp=self._clock(),
			is_transcription=True,
			origin=Origin.SERVER,
		)

	def complete(self, scope_id: str, transcript: Optional[str], event_id: Optional[str] = None) -> DisplayRecord:
		"""Finalize a scope and return its terminal record.

		The server's transcript wins over the accumulated deltas; the buffer is
		only used when the completion carries no text.

		Raises:
			DuplicateCompletion: If the scope was already finalized.
		"""
		if scope_id in self._finalized:
			raise DuplicateCompletion(scope_id)
		accumulated = self._buffers.pop(scope_id, "")
		self._finalized.add(scope_id)
		return DisplayRecord(
			type=COMPLETED_TYPE,
			event_id=event_id,
			scope_id=scope_id,
			text=transcript if transcript is not None else accumulated,
			timestamp=self._clock(),
			is_transcription=True,
			origin=Origin.SERVER,
		)

	def discard(self, scope_id: str) -> None:
		"""Drop an abandoned buffer without finalizing it."""
		self._buffers.pop(scope_id, None)

	def reset(self) -> None:
		self._buffers.clear()
		self._finalized.clear()
