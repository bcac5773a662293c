"""
Health check router for monitoring API status
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from .. import __version__
from ..models.requests import HealthResponse
from ..services.gemini_service import chat_assistant, scan_summarizer
from ..services.tts_service import tts_service

router = APIRouter(prefix="/api", tags=["health"])

API_ENDPOINTS = [
    "POST /api/chat",
    "POST /api/scan",
    "POST /api/generate-audio",
    "GET /api/health",
]


@router.get("/health", response_model=HealthResponse, response_model_by_alias=True)
async def health_check():
    """
    Health check endpoint reporting credential status and active models
    """
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        chat_key_loaded=bool(chat_assistant.api_key),
        scan_key_loaded=bool(scan_summarizer.api_key),
        tts_key_loaded=tts_service.enabled,
        active_chat_model=chat_assistant.active_model or "none",
        active_scan_model=scan_summarizer.active_model or "none",
        endpoints=API_ENDPOINTS,
    )
