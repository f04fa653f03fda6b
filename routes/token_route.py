from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response

from controllers.token_controller import mint_token, relay_offer

router = APIRouter()


@router.get("/token")
async def get_token(request: Request):
    """Mint an ephemeral credential the browser uses to open its peer connection."""
    try:
        result = await mint_token(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return result


@router.post("/session")
async def post_session_offer(request: Request):
    """Relay a raw SDP offer and return the SDP answer."""
    try:
        offer = (await request.body()).decode("utf-8")
        answer = await relay_offer(request, offer)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return Response(content=answer, media_type="application/sdp")
