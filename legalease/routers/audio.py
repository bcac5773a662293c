"""
Text-to-speech router for narrating arbitrary text
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from ..exceptions import SynthesisError
from ..models.requests import AudioRequest, AudioResponse, ErrorResponse
from ..services.tts_service import tts_service

router = APIRouter(prefix="/api", tags=["audio"])


def _error(status_code: int, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, details=details).to_content(),
    )


@router.post("/generate-audio", response_model=AudioResponse, response_model_by_alias=True)
async def generate_audio(request: AudioRequest):
    """
    Convert text to speech with ElevenLabs.

    The audio is returned base64-encoded and also stored for download under
    the static audio path.
    """
    if not tts_service.enabled:
        return _error(401, "ElevenLabs API Key is missing from server configuration.")

    text = request.text
    if not isinstance(text, str) or not text.strip():
        return _error(400, "Text is required for audio generation")

    try:
        narration = await tts_service.synthesize(text)
    except SynthesisError as e:
        if e.provider_status:
            return _error(e.provider_status, "ElevenLabs API failure", details=e.response_body)
        logger.error(f"[TTS] Audio generation failed: {e.detail}")
        return _error(e.status_code, "Failed to generate audio", details=e.detail)

    return AudioResponse(
        audio_base64=narration.encoded_audio,
        audio_path=narration.audio_path,
        mime_type=narration.mime_type,
    )
