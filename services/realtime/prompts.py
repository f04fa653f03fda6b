"""Prompt helpers for realtime transcription sessions."""

from __future__ import annotations


def translation_instructions(target_language: str) -> str:
	"""Return session instructions that turn the model into a strict translator."""
	return (
		f"You are a translator. When the user speaks, translate their speech to {target_language} "
		f"and respond with only the {target_language} translation. "
		"Do not add any commentary or additional text, just provide the translation."
	)
