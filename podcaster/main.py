import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from podcaster.config import settings
from podcaster.limiter import limiter
from podcaster.routers import podcast
from podcaster.services.tts_selector import resolve_synthesis

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("podcaster")

OUTPUT_DIR = Path(settings.OUTPUT_DIR)
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: pick the TTS backend once for the whole process
    app.state.synthesis = resolve_synthesis(settings)
    logger.info(f"Synthesis backend: {app.state.synthesis.kind}, output dir: {OUTPUT_DIR.resolve()}")
    yield

app = FastAPI(lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(podcast.router, prefix="/api", tags=["podcast"])

# Generated podcasts, served as-is
app.mount("/audio", StaticFiles(directory=OUTPUT_DIR), name="audio")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("podcaster.main:app", host="0.0.0.0", port=settings.PORT, reload=False)
