"""Ordered, deduplicated log of display records for one connection."""

from __future__ import annotations

from typing import List, Optional, Tuple

from models.session_models import DisplayRecord


class EventLogStore:
	"""Newest-first record list with per-scope collapsing.

	Transcription records replace any earlier record for the same scope so an
	utterance is shown once. Consecutive ``*.delta`` records of the same
	non-transcription type are coalesced to the latest one.
	"""

	def __init__(self) -> None:
		self._records: List[DisplayRecord] = []
		self._version = 0

	def __len__(self) -> int:
		return len(self._records)

	@property
	def version(self) -> int:
		"""Counter bumped on every mutation."""
		return self._version

	def append(self, record: DisplayRecord) -> None:
		"""Insert a record at the head of the log, collapsing where required."""
		if record.is_transcription and record.scope_id is not None:
			self.collapse(record.scope_id)
		elif self._coalesces_with_head(record):
			self._records.pop(0)
		self._records.insert(0, record)
		self._version += 1

	def collapse(self, scope_id: str) -> int:
		"""Remove transcription records for a scope and return how many were removed."""
		kept = [r for r in self._records if not (r.is_transcription and r.scope_id == scope_id)]
		removed = len(self._records) - len(kept)
		if removed:
			self._records = kept
			self._version += 1
		return removed

	def clear(self) -> None:
		if self._records:
			self._records = []
		self._version += 1

	def snapshot(self) -> Tuple[DisplayRecord, ...]:
		return tuple(self._records)

	def find(self, event_id: str) -> Optional[DisplayRecord]:
		"""Return the newest record carrying ``event_id``."""
		for record in self._records:
			if record.event_id == event_id:
				return record
		return None

	def _coalesces_with_head(self, record: DisplayRecord) -> bool:
		if record.is_transcription or not record.type.endswith(".delta") or not self._records:
			return False
		head = self._records[0]
		return not head.is_transcription and head.type == record.type
