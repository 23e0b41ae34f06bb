"""Main FastAPI application with hexagonal architecture."""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from payouts.config import supabase_config_from_env
from payouts.errors import PayoutsError

from . import __version__
from .api.errors import register_exception_handlers
from .api.rest.reports import router as reports_router
from .api.rest.routes import router as analysis_router
from .api.rest.settings import router as settings_router
from .api.websocket.handlers import handle_analysis_websocket
from .application.use_cases.run_analysis import RunAnalysisUseCase
from .application.use_cases.settings import SettingsPoller
from .dependencies import (
    get_run_analysis_use_case,
    get_service_config,
    get_settings_service,
)
from .logging_config import configure_logging

# Load environment variables before any config is read
load_dotenv()
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    service = get_settings_service()
    try:
        await asyncio.get_running_loop().run_in_executor(None, service.hydrate)
    except PayoutsError as e:
        logger.warning(f"Settings not loaded at startup, will retry on first use: {e}")
    poller = SettingsPoller(service, get_service_config().settings_poll_s)
    poller.start()
    yield
    # Shutdown
    await poller.stop()


app = FastAPI(
    title="Lobby Payouts API",
    description="Prize distribution and reporting for casual Free Fire lobbies",
    version=__version__,
    lifespan=lifespan,
)

# CORS configuration for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_service_config().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    api_key_configured: bool
    store_configured: bool


@app.get("/", tags=["meta"])
async def root():
    """API root with information and available endpoints."""
    return {
        "name": "Lobby Payouts API",
        "version": __version__,
        "description": "Screenshot-driven prize distribution for casual lobbies",
        "docs": "/docs",
        "endpoints": {
            "health": "GET /health",
            "analyze": "POST /api/analyze",
            "ocr": "POST /api/ocr",
            "calculate": "POST /api/calculate",
            "analysis": "POST /api/analysis",
            "prizePreview": "POST /api/prizes/preview",
            "reports": "GET /api/reports",
            "dashboard": "GET /api/dashboard",
            "settings": "GET /api/settings",
            "websocket": "WS /ws/analysis",
        },
    }


@app.get("/health", response_model=HealthResponse, tags=["meta"])
async def health_check():
    """Check API health and configuration status."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        api_key_configured=bool(os.environ.get("GEMINI_API_KEY")),
        store_configured=supabase_config_from_env().enabled,
    )


# Include REST routes
app.include_router(analysis_router)
app.include_router(reports_router)
app.include_router(settings_router)


# WebSocket endpoint for analysis with progress
@app.websocket("/ws/analysis")
async def websocket_analysis(
    websocket: WebSocket,
    use_case: RunAnalysisUseCase = Depends(get_run_analysis_use_case),
):
    """WebSocket endpoint for a multi-screenshot analysis with live progress.

    Send one message:
    {
        "action": "analyze",
        "images": [{"data": "...", "mimeType": "image/png"}],
        "slotsSold": 18,          // Optional, defaults to 24
        "tournament": "Sexta"     // Optional, defaults to the run time
    }

    Progress updates follow, one per screenshot, and the final message has
    status "completed" and the saved report under "report".
    """
    await handle_analysis_websocket(websocket, use_case)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.environ.get("HOST", "127.0.0.1"), port=int(os.environ.get("PORT", "8000")))
