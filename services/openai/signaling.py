"""Relay a WebRTC SDP offer to the hosted realtime endpoint."""

import dataclasses
import json
import logging
import os
from typing import Optional

import httpx

from services.realtime.session_config import TranscriptionSettings, session_payload

LOGGER = logging.getLogger(__name__)
DEFAULT_CALLS_URL = os.getenv("REALTIME_CALLS_URL", "https://api.openai.com/v1/realtime/calls")


class SignalingService:
    """Trade an SDP offer for the realtime service's SDP answer."""

    def __init__(self, api_key: str, http_client: httpx.AsyncClient, calls_url: Optional[str] = None) -> None:
        """Initialize the service.

        Args:
            api_key: Credential sent as the bearer token.
            http_client: Shared async HTTP client.
            calls_url: Override for the realtime calls endpoint.
        """
        if not api_key:
            raise ValueError("An API key is required for signaling.")
        if http_client is None:
            raise ValueError("An httpx.AsyncClient is required for signaling.")
        self.api_key = api_key
        self.http_client = http_client
        self.calls_url = calls_url or DEFAULT_CALLS_URL

    async def exchange_offer(self, offer_sdp: str, settings: TranscriptionSettings) -> str:
        """Post the offer with the session description and return the SDP answer."""
        if not offer_sdp or not offer_sdp.strip():
            raise ValueError("SDP offer is required.")
        session = session_payload(dataclasses.replace(settings, protocol="ga"), include_model=True)
        try:
            response = await self.http_client.post(
                self.calls_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                files={
                    "sdp": (None, offer_sdp.encode("utf-8"), "application/sdp"),
                    "session": (None, json.dumps(session).encode("utf-8"), "application/json"),
                },
            )
        except httpx.HTTPError as exc:
            LOGGER.error("Realtime call setup request failed: %s", exc)
            raise RuntimeError(f"Realtime call setup failed: {exc}") from exc

        if response.status_code >= 400:
            LOGGER.error("Realtime call setup rejected (%s): %s", response.status_code, response.text)
            raise RuntimeError(f"Realtime call setup rejected with status {response.status_code}")
        return response.text
