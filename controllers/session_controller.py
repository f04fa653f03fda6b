"""Session lifecycle helpers for realtime transcription."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from services.realtime.session_store import SessionStore
from services.realtime.transcription_session import TranscriptionSession


def _lookup(request: Request, session_id: str) -> TranscriptionSession:
	store: SessionStore = request.app.state.session_store
	try:
		return store.get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new transcription session and return its id."""
	store: SessionStore = request.app.state.session_store
	session = store.create()
	return {"session_id": session.session_id, "websocket_path": f"/ws/{session.session_id}"}


async def list_events(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return the visible event log, newest first."""
	session = _lookup(request, session_id)
	return {
		"session_id": session_id,
		"active": session.state.is_active,
		"configured": session.state.configured,
		"records": [record.to_dict() for record in session.get_visible_log()],
	}


async def current_transcript(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return the latest transcript text for the session."""
	session = _lookup(request, session_id)
	return {
		"session_id": session_id,
		"text": session.get_current_transcript(),
		"live_scopes": session.aggregator.live_scopes(),
	}


async def end_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Reset and forget a session."""
	store: SessionStore = request.app.state.session_store
	try:
		store.discard(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {"session_id": session_id, "closed": True}
