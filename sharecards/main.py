"""MyScrobble share cards - FastAPI main application.

Story-format share images: headless generation, live preview and the
browser capture fallback.
"""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from sharecards import __version__
from sharecards.api import share_router, set_capture_engine, set_device_policy, set_generation_service
from sharecards.config import settings
from sharecards.services.delivery import DevicePolicy
from sharecards.services.generation import GenerationService
from sharecards.workers.capture import CaptureEngine

logger.remove()
logger.add(sys.stderr, level=settings.log_level)

# Services
generation_service: GenerationService = None
capture_engine: CaptureEngine = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    global generation_service, capture_engine

    logger.info(f"Starting MyScrobble share cards v{__version__}")
    logger.info(f"Data directory: {settings.data_dir}")
    logger.info(f"Fonts directory: {settings.fonts_dir}")

    generation_service = GenerationService()
    capture_engine = CaptureEngine()  # Browser starts on first capture

    set_generation_service(generation_service)
    set_capture_engine(capture_engine)
    set_device_policy(DevicePolicy())

    yield

    # Cleanup
    await capture_engine.close()
    logger.info("Shutting down MyScrobble share cards")


app = FastAPI(
    title="MyScrobble Share Cards",
    description="1080x1920 share images for dashboard moments",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(share_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("sharecards.main:app", host=settings.host, port=settings.port, reload=settings.debug)
