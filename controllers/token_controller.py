"""Credential and signaling helpers for browser realtime connections."""

from typing import Any, Dict

from fastapi import HTTPException, Request

from services.openai.client_secrets import ClientSecretService
from services.openai.signaling import SignalingService


async def mint_token(request: Request) -> Dict[str, Any]:
    """Return an ephemeral client secret for the configured transcription session."""
    service = ClientSecretService(request.app.state.openai_client)
    try:
        return await service.create(request.app.state.settings)
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc


async def relay_offer(request: Request, offer_sdp: str) -> str:
    """Exchange the browser's SDP offer for the realtime service's answer.

    Args:
        request: FastAPI Request (used to access shared clients/state).
        offer_sdp: SDP offer text produced by the browser peer connection.

    Returns:
        The SDP answer text.

    Raises:
        HTTPException(400) for an empty offer, HTTPException(502) if the
        realtime service rejects the call.
    """
    openai_client = request.app.state.openai_client
    service = SignalingService(
        api_key=getattr(openai_client, "api_key", None),
        http_client=request.app.state.http_client,
    )
    try:
        return await service.exchange_offer(offer_sdp, request.app.state.settings)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
