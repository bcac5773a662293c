"""
Services package initialization
"""

from .ocr_service import text_extractor
from .gemini_service import scan_summarizer, chat_assistant
from .tts_service import tts_service
from .scan_service import scan_pipeline

__all__ = [
    "text_extractor",
    "scan_summarizer",
    "chat_assistant",
    "tts_service",
    "scan_pipeline",
]
