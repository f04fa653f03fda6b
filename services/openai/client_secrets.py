"""Ephemeral client credentials for browser-side realtime connections."""

import dataclasses
import logging
from typing import Any, Dict

from openai import AsyncOpenAI

from services.openai.response_utils import serialize_response
from services.realtime.session_config import TranscriptionSettings, session_payload

LOGGER = logging.getLogger(__name__)


class ClientSecretService:
    """Mint short-lived client secrets scoped to the transcription session."""

    def __init__(self, client: AsyncOpenAI) -> None:
        """Initialize the service with a shared OpenAI client."""
        if client is None:
            raise ValueError("AsyncOpenAI client is required.")
        self.client = client

    async def create(self, settings: TranscriptionSettings) -> Dict[str, Any]:
        """Return the serialized client secret, including its ``value``.

        The client secrets endpoint only accepts the GA session shape, so the
        session is always described in that revision here; the in-band
        handshake still follows ``settings.protocol``.
        """
        session = session_payload(dataclasses.replace(settings, protocol="ga"), include_model=True)
        try:
            response = await self.client.realtime.client_secrets.create(session=session)
        except Exception as exc:
            LOGGER.error("OpenAI client secret request failed: %s", exc)
            raise RuntimeError(f"Client secret request failed: {exc}") from exc

        data = serialize_response(response)
        if not data.get("value"):
            LOGGER.error("Client secret response did not include a value: %r", data)
            raise RuntimeError("Client secret response did not include a value.")
        return data
