"""
Text-to-Speech service for narrating summaries using the ElevenLabs API
"""

import base64
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from ..config import settings
from ..exceptions import ErrorKind, SynthesisError
from ..models.schemas import NarrationResult


class TTSService:
    """Service for converting summary text to speech using ElevenLabs"""

    MIME_TYPE = "audio/mpeg"

    def __init__(
        self,
        api_key: Optional[str],
        voice_id: str,
        model_id: str,
        base_url: str,
        audio_directory: str,
        audio_url_prefix: str = "/uploads/audio",
        max_chars: int = 5000,
        min_chars: int = 5,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.base_url = base_url.rstrip("/")
        self.audio_directory = Path(audio_directory)
        self.audio_url_prefix = audio_url_prefix.rstrip("/")
        self.max_chars = max_chars
        self.min_chars = min_chars
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def initialize(self):
        """Prepare the audio directory and report credential status"""
        self.audio_directory.mkdir(parents=True, exist_ok=True)
        if self.enabled:
            logger.info(f"✅ Found ElevenLabs API key: ***{self.api_key[-4:]}")
        else:
            logger.warning("⏭️ ELEVEN_LABS_API_KEY not set, narration is disabled")

    async def synthesize(self, text: str) -> NarrationResult:
        """
        Synthesize speech for the given text and store it for static serving.

        Args:
            text: Summary text to narrate. Anything past max_chars is dropped.

        Returns:
            NarrationResult with raw bytes, base64 audio and the public audio path.

        Raises:
            SynthesisError: missing key, degenerate input, or provider failure.
        """
        if not self.api_key:
            raise SynthesisError("ElevenLabs API key is not configured", kind=ErrorKind.INVALID_CREDENTIAL)
        if not text or len(text.strip()) < self.min_chars:
            raise SynthesisError("Text is too short for audio generation", kind=ErrorKind.UNREADABLE)

        truncated_text = text[:self.max_chars]
        logger.info(f"[TTS] Generating audio for {len(truncated_text)} chars...")
        start_time = time.time()

        audio_bytes = await self._request_audio(truncated_text)
        audio_path = self._save_audio(audio_bytes)

        elapsed = time.time() - start_time
        logger.info(f"[TTS] Audio generated in {elapsed:.1f}s → {audio_path}")

        return NarrationResult(
            audio_bytes=audio_bytes,
            encoded_audio=base64.b64encode(audio_bytes).decode("ascii"),
            mime_type=self.MIME_TYPE,
            audio_path=audio_path,
        )

    async def _request_audio(self, text: str) -> bytes:
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": 0.5,
                "similarity_boost": 0.75,
            },
        }
        headers = {
            "Content-Type": "application/json",
            "Accept": self.MIME_TYPE,
            "xi-api-key": self.api_key,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/{self.voice_id}", json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise SynthesisError(f"TTS generation failed: {e}") from e

        if response.status_code >= 400:
            error_body = response.text
            logger.error(f"[TTS] ElevenLabs API error {response.status_code}: {error_body}")
            raise SynthesisError(
                f"ElevenLabs API returned {response.status_code}: {error_body}",
                kind=self._kind_for_status(response.status_code),
                status_code=response.status_code,
                response_body=error_body,
            )

        if not response.content:
            raise SynthesisError("TTS generation failed: no audio content received from ElevenLabs")

        return response.content

    def _save_audio(self, audio_bytes: bytes) -> str:
        """Write audio under the static directory and return its public path"""
        file_name = f"scan_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}.mp3"
        try:
            self.audio_directory.mkdir(parents=True, exist_ok=True)
            with open(self.audio_directory / file_name, "wb") as out:
                out.write(audio_bytes)
        except OSError as e:
            raise SynthesisError(f"TTS generation failed: could not store audio ({e})") from e
        return f"{self.audio_url_prefix}/{file_name}"

    @staticmethod
    def _kind_for_status(status_code: int) -> ErrorKind:
        if status_code in (401, 403):
            return ErrorKind.INVALID_CREDENTIAL
        if status_code == 429:
            return ErrorKind.QUOTA_EXCEEDED
        return ErrorKind.UNKNOWN


# Global TTS service instance
tts_service = TTSService(
    api_key=settings.eleven_labs_api_key,
    voice_id=settings.eleven_labs_voice_id,
    model_id=settings.eleven_labs_model_id,
    base_url=settings.eleven_labs_base_url,
    audio_directory=settings.audio_directory,
    audio_url_prefix=settings.audio_url_prefix,
    max_chars=settings.tts_max_chars,
    timeout=settings.tts_timeout_seconds,
)
