"""
Request and Response models for API endpoints
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .schemas import PipelineResponse


class ScanResponse(BaseModel):
    """Response model for a successful document scan"""
    success: bool = True
    extracted_text: str = Field(alias="extractedText")
    ocr_method: str = Field(alias="ocrMethod")
    summary: str
    model: str
    audio_base64: Optional[str] = Field(default=None, alias="audioBase64")
    audio_path: Optional[str] = Field(default=None, alias="audioPath")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    file_name: str = Field(alias="fileName")
    language: str
    processing_time: str = Field(alias="processingTime")

    class Config:
        populate_by_name = True

    @classmethod
    def from_pipeline(cls, result: PipelineResponse) -> "ScanResponse":
        narration = result.narration
        return cls(
            success=result.success,
            extracted_text=result.extraction.text,
            ocr_method=result.extraction.method.value,
            summary=result.summary.summary_text,
            model=result.summary.model_identifier,
            audio_base64=narration.encoded_audio if narration else None,
            audio_path=narration.audio_path if narration else None,
            mime_type=narration.mime_type if narration else None,
            file_name=result.file_name,
            language=result.language,
            processing_time=result.processing_time,
        )


class ErrorResponse(BaseModel):
    """Response model for errors"""
    success: bool = False
    error: str
    processing_time: Optional[str] = Field(default=None, alias="processingTime")
    extracted_text: Optional[str] = Field(default=None, alias="extractedText")
    details: Optional[Any] = None
    request_id: Optional[str] = Field(default=None, alias="requestId")

    class Config:
        populate_by_name = True

    def to_content(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ChatTurn(BaseModel):
    """One earlier message of a chat conversation"""
    role: str
    text: Optional[str] = None
    parts: Optional[List[Dict[str, Any]]] = None

    def content_text(self) -> str:
        if self.parts:
            return "".join(str(part.get("text", "")) for part in self.parts)
        return self.text or ""


class ChatRequest(BaseModel):
    """Request model for the legal chat assistant"""
    message: Optional[Any] = None
    history: List[ChatTurn] = []


class ChatResponse(BaseModel):
    """Response model for the legal chat assistant"""
    reply: str
    model: str


class AudioRequest(BaseModel):
    """Request model for standalone narration"""
    text: Optional[Any] = None


class AudioResponse(BaseModel):
    """Response model for standalone narration"""
    success: bool = True
    audio_base64: str = Field(alias="audioBase64")
    audio_path: str = Field(alias="audioPath")
    mime_type: str = Field(alias="mimeType")

    class Config:
        populate_by_name = True


class HealthResponse(BaseModel):
    """Response model for health check"""
    status: str
    timestamp: datetime
    version: str
    chat_key_loaded: bool = Field(alias="chatKeyLoaded")
    scan_key_loaded: bool = Field(alias="scanKeyLoaded")
    tts_key_loaded: bool = Field(alias="ttsKeyLoaded")
    active_chat_model: str = Field(alias="activeChatModel")
    active_scan_model: str = Field(alias="activeScanModel")
    endpoints: List[str]

    class Config:
        populate_by_name = True
