"""
Models package initialization
"""

from .schemas import *
from .requests import *

__all__ = [
    "ExtractionMethod",
    "UploadedDocument",
    "ExtractionResult",
    "SummaryResult",
    "NarrationResult",
    "PipelineResponse",
    "ScanResponse",
    "ErrorResponse",
    "ChatTurn",
    "ChatRequest",
    "ChatResponse",
    "AudioRequest",
    "AudioResponse",
    "HealthResponse",
]
