import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from podcaster.config import settings
from podcaster.limiter import limiter
from podcaster.services.errors import PodcastRequestError, ScriptFormatError
from podcaster.services.pipeline import parse_request, produce_podcast
from podcaster.services.tts_selector import SynthesisConfig

logger = logging.getLogger("podcaster.api")

router = APIRouter()

GENERIC_FAILURE = "Failed to generate podcast script or audio."

def get_synthesis(request: Request) -> SynthesisConfig:
    """The backend chosen at startup, shared read-only by every request."""
    return request.app.state.synthesis

@router.post("/generate-podcast")
@limiter.limit(settings.PODCAST_RATE_LIMIT)
async def generate_podcast(
    request: Request,
    payload: Any = Body(None),
    synthesis: SynthesisConfig = Depends(get_synthesis),
):
    try:
        result = await produce_podcast(parse_request(payload), synthesis)
        return result.model_dump()
    except PodcastRequestError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except ScriptFormatError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"Error generating podcast: {e}")
        return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE})

@router.get("/health")
async def health(synthesis: SynthesisConfig = Depends(get_synthesis)):
    return {"status": "ok", "tts_backend": synthesis.kind}
