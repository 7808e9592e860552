from __future__ import annotations

from fastapi import FastAPI

from voicebrief.api.dependencies import build_coordinator
from voicebrief.api.routes.briefs import router as briefs_router
from voicebrief.api.routes.notes import router as notes_router
from voicebrief.config import settings
from voicebrief.intelligence.coordinator import RefreshCoordinator
from voicebrief.logging_config import configure_logging


def create_app(coordinator: RefreshCoordinator | None = None) -> FastAPI:
    """Build the API around ``coordinator`` (or one configured from settings)."""
    configure_logging(settings.log_level)

    app = FastAPI(
        title="VoiceBrief API",
        description="Voice note transcription, extraction, and tiered briefs",
        version="0.1.0",
    )
    app.state.coordinator = coordinator or build_coordinator(settings)

    app.include_router(notes_router)
    app.include_router(briefs_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("voicebrief.api.main:app", host=settings.api_host, port=settings.api_port)
