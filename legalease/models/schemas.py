"""
Value objects passed between the scan pipeline stages
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from ..config import DEFAULT_SUMMARY_LANGUAGE


class ExtractionMethod(str, Enum):
    """Which extraction path produced the text"""
    EMBEDDED_TEXT = "embedded-text"
    OCR_IMAGE = "ocr-image"
    OCR_PDF_FALLBACK = "ocr-pdf-fallback"


class UploadedDocument(BaseModel):
    """Raw upload as received by the scan endpoint; never written to disk"""
    content: bytes
    declared_media_type: str
    original_file_name: str
    size_bytes: int


class ExtractionResult(BaseModel):
    """Text recovered from a document and how it was recovered"""
    text: str
    method: ExtractionMethod


class SummaryResult(BaseModel):
    """Plain-language summary and the Gemini model that wrote it"""
    summary_text: str
    model_identifier: str

    class Config:
        protected_namespaces = ()


class NarrationResult(BaseModel):
    """Synthesized narration of a summary"""
    audio_bytes: bytes
    encoded_audio: str
    mime_type: str
    audio_path: str


class PipelineResponse(BaseModel):
    """Everything one scan produced"""
    extraction: ExtractionResult
    summary: SummaryResult
    narration: Optional[NarrationResult] = None
    file_name: str
    language: str = DEFAULT_SUMMARY_LANGUAGE
    processing_time: str
    success: bool = True
