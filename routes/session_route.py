"""FastAPI routes for realtime transcription sessions."""

from fastapi import APIRouter, HTTPException, Request

from controllers.session_controller import current_transcript, end_session, list_events, start_session

router = APIRouter(prefix="/sessions")


@router.post("")
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/events")
async def list_events_route(request: Request, session_id: str):
	try:
		return await list_events(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}/transcript")
async def transcript_route(request: Request, session_id: str):
	try:
		return await current_transcript(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.delete("/{session_id}")
async def end_session_route(request: Request, session_id: str):
	try:
		return await end_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
