"""Per-connection transcription reducer tying classifier, aggregator and log together."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List, Optional

from models.session_models import DisplayRecord, Origin, OutboundCommand, SessionState
from services.realtime.channel import Channel
from services.realtime.command_dispatcher import CommandDispatcher
from services.realtime.errors import ChannelUnavailable, DuplicateCompletion, MalformedEvent
from services.realtime.event_classifier import EventClassifier
from services.realtime.event_log import EventLogStore
from services.realtime.events import ClassifiedEvent, EventCategory, parse_raw_event
from services.realtime.session_config import SessionConfigurator, TranscriptionSettings
from services.realtime.transcription_aggregator import TranscriptionAggregator

LOGGER = logging.getLogger(__name__)


class TranscriptionSession:
	"""Consume channel notifications and maintain the transcript and event log.

	Every notification is handled to completion before the next one; nothing
	here blocks or schedules work, so closing the channel leaves no pending
	aggregation behind.
	"""

	def __init__(
		self,
		session_id: str,
		channel: Channel,
		settings: Optional[TranscriptionSettings] = None,
		clock: Callable[[], float] = time.time,
	) -> None:
		self.session_id = session_id
		self.channel = channel
		self.settings = settings or TranscriptionSettings()
		self.state = SessionState()
		self.log_store = EventLogStore()
		self.aggregator = TranscriptionAggregator(clock=clock)
		self.classifier = EventClassifier()
		self.dispatcher = CommandDispatcher(channel, self.log_store, clock=clock)
		self.configurator = SessionConfigurator(self.settings)
		self._clock = clock
		self._current_scope: Optional[str] = None
		self._anonymous_scope: Optional[str] = None
		self._anonymous_count = 0

	# channel notifications

	def on_open(self) -> None:
		"""Start a connection: reset all state, then run the configuration handshake.

		A repeated open on a live connection still empties the log, but the
		handshake is not sent twice. If the handshake cannot be sent the
		session stays inactive, so the next open retries it.
		"""
		configured = self.state.is_active and self.state.configured
		if configured:
			LOGGER.debug("Session %s reopened while active; keeping configuration", self.session_id)
		self._reset()
		self.state.configured = configured
		self.state.is_active = True
		LOGGER.info("Session %s channel opened", self.session_id)
		try:
			self.configurator.configure(self.state, self.dispatcher)
		except ChannelUnavailable:
			self.state.reset()
			raise

	def on_close(self) -> None:
		"""End a connection; nothing survives into the next one."""
		self._reset()
		LOGGER.info("Session %s channel closed", self.session_id)

	def on_message(self, message: str) -> None:
		"""Reduce one inbound channel message."""
		if not self.state.is_active:
			LOGGER.debug("Session %s dropping message received while inactive", self.session_id)
			return
		try:
			raw = parse_raw_event(message)
		except MalformedEvent as exc:
			LOGGER.warning("Session %s dropping malformed event: %s", self.session_id, exc)
			return
		event = self.classifier.classify(
			raw,
			live_scopes=self.aggregator.live_scopes(),
			fallback_scope=self._current_scope,
		)
		handler = {
			EventCategory.LIFECYCLE: self._log_verbatim,
			EventCategory.BOUNDARY: self._handle_boundary,
			EventCategory.DELTA: self._handle_delta,
			EventCategory.COMPLETION: self._handle_completion,
			EventCategory.PASS_THROUGH: self._handle_pass_through,
		}[event.category]
		handler(event, self._clock())

	# UI-facing accessors

	def get_visible_log(self) -> List[DisplayRecord]:
		return list(self.log_store.snapshot())

	def get_current_transcript(self) -> str:
		"""Return the newest live transcript, else the newest completed one."""
		records = [r for r in self.log_store.snapshot() if r.is_transcription]
		for record in records:
			if record.is_live:
				return record.text or ""
		return (records[0].text or "") if records else ""

	def send_command(self, command: Dict[str, Any]) -> OutboundCommand:
		return self.dispatcher.send(command)

	# category handlers

	def _log_verbatim(self, event: ClassifiedEvent, received_at: float) -> None:
		self.log_store.append(
			DisplayRecord(
				type=event.type,
				event_id=event.event_id,
				timestamp=received_at,
				origin=Origin.SERVER,
				payload=event.raw,
			)
		)

	def _handle_boundary(self, event: ClassifiedEvent, received_at: float) -> None:
		scope_id = event.scope_id or self._boundary_scope()
		if self.aggregator.is_finalized(scope_id):
			LOGGER.debug("Session %s ignoring %s for finalized scope %s", self.session_id, event.type, scope_id)
			return
		self._switch_scope(scope_id)
		self.aggregator.begin(scope_id)

		if event.trigger == "committed" and self.settings.translating:
			try:
				self.dispatcher.send({"type": "response.create"})
			except ChannelUnavailable as exc:
				LOGGER.warning("Session %s could not request a response: %s", self.session_id, exc)

	def _handle_delta(self, event: ClassifiedEvent, received_at: float) -> None:
		scope_id = event.scope_id or self._adopt_anonymous_scope()
		if self.aggregator.is_finalized(scope_id):
			LOGGER.debug("Session %s ignoring delta for finalized scope %s", self.session_id, scope_id)
			return
		self._switch_scope(scope_id)
		self.log_store.append(self.aggregator.apply_delta(scope_id, event.text or "", event.event_id))

	def _handle_completion(self, event: ClassifiedEvent, received_at: float) -> None:
		scope_id = event.scope_id or self._adopt_anonymous_scope()
		try:
			record = self.aggregator.complete(scope_id, event.text, event.event_id)
		except DuplicateCompletion:
			LOGGER.debug("Session %s ignoring duplicate completion (%s) for %s", self.session_id, event.type, scope_id)
			return
		if self._current_scope == scope_id:
			self._current_scope = None
		self.log_store.append(record)

	def _handle_pass_through(self, event: ClassifiedEvent, received_at: float) -> None:
		if event.loggable:
			self._log_verbatim(event, received_at)
		else:
			LOGGER.debug("Session %s dropping %s", self.session_id, event.type)

	# helpers

	def _switch_scope(self, scope_id: str) -> None:
		"""Make scope_id current; in single-slot mode the previous utterance is purged."""
		previous = self._current_scope
		if self.settings.single_slot and previous and previous != scope_id:
			self.aggregator.discard(previous)
			self.log_store.collapse(previous)
		self._current_scope = scope_id

	def _next_anonymous_scope(self) -> str:
		self._anonymous_count += 1
		self._anonymous_scope = f"utterance-{self._anonymous_count}"
		return self._anonymous_scope

	def _boundary_scope(self) -> str:
		"""Scope for a boundary without an id: continue an open anonymous utterance, else start one."""
		current = self._current_scope
		if current is not None and current == self._anonymous_scope and not self.aggregator.is_finalized(current):
			return current
		return self._next_anonymous_scope()

	def _adopt_anonymous_scope(self) -> str:
		scope_id = self._current_scope or self._next_anonymous_scope()
		self._current_scope = scope_id
		return scope_id

	def _reset(self) -> None:
		self.state.reset()
		self.aggregator.reset()
		self.log_store.clear()
		self._current_scope = None
		self._anonymous_scope = None
		self._anonymous_count = 0
