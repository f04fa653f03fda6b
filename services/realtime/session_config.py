"""Session settings and the once-per-connection configuration handshake."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from models.session_models import OutboundCommand, SessionState
from services.realtime.command_dispatcher import CommandDispatcher
from services.realtime.prompts import translation_instructions

LOGGER = logging.getLogger(__name__)

PROTOCOLS = ("ga", "beta")
NOISE_REDUCTION_MODES = ("near_field", "far_field", "off")


def _env_bool(name: str, default: bool) -> bool:
	value = os.getenv(name)
	if value is None or not value.strip():
		return default
	return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_number(name: str, default, cast):
	value = os.getenv(name)
	if value is None or not value.strip():
		return default
	try:
		return cast(value.strip())
	except ValueError as exc:
		raise ValueError(f"{name}={value!r} is not a valid {cast.__name__}") from exc


@dataclass
class TranscriptionSettings:
	"""Configuration declared to the realtime service when a channel opens."""

	realtime_model: str = "gpt-realtime"
	transcription_model: str = "gpt-4o-transcribe"
	language: Optional[str] = "en"
	noise_reduction: str = "near_field"
	vad_threshold: float = 0.5
	prefix_padding_ms: int = 300
	silence_duration_ms: int = 500
	protocol: str = "ga"
	translate_to: Optional[str] = None
	single_slot: bool = False

	def __post_init__(self) -> None:
		if self.protocol not in PROTOCOLS:
			raise ValueError(f"Unsupported protocol {self.protocol!r}; expected one of {PROTOCOLS}")
		if self.noise_reduction not in NOISE_REDUCTION_MODES:
			raise ValueError(
				f"Unsupported noise reduction {self.noise_reduction!r}; expected one of {NOISE_REDUCTION_MODES}"
			)

	@property
	def translating(self) -> bool:
		return bool(self.translate_to)

	@classmethod
	def from_env(cls) -> "TranscriptionSettings":
		"""Build settings from REALTIME_* environment variables."""
		defaults = cls()
		return cls(
			realtime_model=os.getenv("REALTIME_MODEL") or defaults.realtime_model,
			transcription_model=os.getenv("REALTIME_TRANSCRIPTION_MODEL") or defaults.transcription_model,
			language=os.getenv("REALTIME_LANGUAGE", defaults.language or "").strip() or None,
			noise_reduction=(os.getenv("REALTIME_NOISE_REDUCTION") or defaults.noise_reduction).strip().lower(),
			vad_threshold=_env_number("REALTIME_VAD_THRESHOLD", defaults.vad_threshold, float),
			prefix_padding_ms=_env_number("REALTIME_PREFIX_PADDING_MS", defaults.prefix_padding_ms, int),
			silence_duration_ms=_env_number("REALTIME_SILENCE_DURATION_MS", defaults.silence_duration_ms, int),
			protocol=(os.getenv("REALTIME_PROTOCOL") or defaults.protocol).strip().lower(),
			translate_to=(os.getenv("REALTIME_TRANSLATE_TO") or "").strip() or None,
			single_slot=_env_bool("REALTIME_SINGLE_SLOT", defaults.single_slot),
		)

	def transcription_block(self) -> Dict[str, Any]:
		block: Dict[str, Any] = {"model": self.transcription_model}
		if self.language:
			block["language"] = self.language
		return block

	def noise_reduction_block(self) -> Optional[Dict[str, str]]:
		if self.noise_reduction == "off":
			return None
		return {"type": self.noise_reduction}

	def turn_detection_block(self) -> Dict[str, Any]:
		block: Dict[str, Any] = {
			"type": "server_vad",
			"threshold": self.vad_threshold,
			"prefix_padding_ms": self.prefix_padding_ms,
			"silence_duration_ms": self.silence_duration_ms,
		}
		if self.translating:
			# responses are requested explicitly when input is committed
			block["create_response"] = False
		return block


def session_payload(settings: TranscriptionSettings, include_model: bool = False) -> Dict[str, Any]:
	"""Return the ``session`` object for the configured protocol revision.

	``include_model`` adds the realtime model name, which credential minting
	needs but an in-band update does not.
	"""
	if settings.protocol == "beta":
		session: Dict[str, Any] = {
			"input_audio_transcription": settings.transcription_block(),
			"input_audio_noise_reduction": settings.noise_reduction_block(),
			"turn_detection": settings.turn_detection_block(),
		}
		if settings.translating:
			session["instructions"] = translation_instructions(settings.translate_to)
			session["modalities"] = ["text"]
			if include_model:
				session["model"] = settings.realtime_model
		return session

	audio_input = {
		"transcription": settings.transcription_block(),
		"noise_reduction": settings.noise_reduction_block(),
		"turn_detection": settings.turn_detection_block(),
	}
	if settings.translating:
		session = {
			"type": "realtime",
			"instructions": translation_instructions(settings.translate_to),
			"output_modalities": ["text"],
			"audio": {"input": audio_input},
		}
		if include_model:
			session["model"] = settings.realtime_model
		return session
	return {"type": "transcription", "audio": {"input": audio_input}}


def configuration_command(settings: TranscriptionSettings) -> Dict[str, Any]:
	"""Return the session update command for the configured protocol."""
	if settings.protocol == "beta" and not settings.translating:
		command_type = "transcription_session.update"
	else:
		command_type = "session.update"
	return {"type": command_type, "session": session_payload(settings)}


class SessionConfigurator:
	"""Declare transcription settings exactly once per connection."""

	def __init__(self, settings: TranscriptionSettings) -> None:
		self.settings = settings

	def configure(self, state: SessionState, dispatcher: CommandDispatcher) -> Optional[OutboundCommand]:
		"""Send the configuration command unless this connection is already configured."""
		if state.configured:
			LOGGER.debug("Session already configured; skipping handshake")
			return None
		command = dispatcher.send(configuration_command(self.settings))
		state.configured = True
		LOGGER.info("Sent %s with transcription model %s", command.type, self.settings.transcription_model)
		return command
