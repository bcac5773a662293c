"""
Routers package initialization
"""

from .health import router as health_router
from .scan import router as scan_router
from .chat import router as chat_router
from .audio import router as audio_router

__all__ = [
    "health_router",
    "scan_router",
    "chat_router",
    "audio_router",
]
