"""WebSocket endpoint relaying the browser's realtime data channel."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.realtime.session_store import SessionStore
from services.realtime.ws_session import RealtimeRelayHandler

router = APIRouter()


def _require_session_store(websocket: WebSocket) -> SessionStore:
	store = getattr(websocket.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


@router.websocket("/ws/{session_id}")
async def realtime_socket(websocket: WebSocket, session_id: str, store: SessionStore = Depends(_require_session_store)):
	"""Feed relayed data channel traffic through the session's transcription reducer."""
	await websocket.accept()
	try:
		session = store.get(session_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session not found"}))
		await websocket.close()
		return

	handler = RealtimeRelayHandler(session)
	while True:
		try:
			raw = await websocket.receive_text()
		except WebSocketDisconnect:
			break
		except Exception:
			await websocket.send_text(json.dumps({"type": "error", "detail": "Invalid websocket frame"}))
			continue
		try:
			payload = json.loads(raw)
		except Exception:
			await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be JSON"}))
			continue
		if not isinstance(payload, dict):
			await websocket.send_text(json.dumps({"type": "error", "detail": "Payload must be a JSON object"}))
			continue
		await handler.handle(websocket, payload)

	# a dropped socket means the relayed data channel is gone too
	handler.close()
	try:
		await websocket.close()
	except Exception:
		pass
