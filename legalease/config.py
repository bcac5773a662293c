"""
Configuration settings for the LegalEase Scanner API
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import os
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # API Configuration
    api_version: str = "v1"
    debug_mode: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/api.log"
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: List[str] = ["*"]
    allowed_hosts: List[str] = ["*"]

    # Gemini Configuration
    gemini_api_key: Optional[str] = None
    scan_api_key: Optional[str] = None
    chat_api_key: Optional[str] = None
    gemini_model_candidates: List[str] = [
        "gemini-2.5-flash",
        "gemini-2.0-flash",
        "gemini-2.0-flash-001",
        "gemini-2.0-flash-lite-001",
        "gemini-2.5-flash-lite",
    ]
    model_probe_timeout_seconds: float = 10.0
    summary_max_chars: int = 50_000
    chat_max_output_tokens: int = 1000

    # ElevenLabs Configuration
    eleven_labs_api_key: Optional[str] = None
    eleven_labs_voice_id: str = "21m00Tcm4TlvDq8ikWAM"  # Rachel
    eleven_labs_model_id: str = "eleven_multilingual_v2"
    eleven_labs_base_url: str = "https://api.elevenlabs.io/v1/text-to-speech"
    tts_max_chars: int = 5000
    tts_timeout_seconds: float = 60.0

    # File Storage Configuration
    audio_directory: str = "uploads/audio"
    audio_url_prefix: str = "/uploads/audio"
    max_file_size_mb: int = 10

    # Extraction Configuration
    min_readable_chars: int = 10
    ocr_language: str = "eng"
    ocr_dpi: int = 200
    ocr_max_pages: int = 20

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from environment

    def __init__(self, **data):
        super().__init__(**data)

        # Scan and chat keys fall back to the shared Gemini key
        if not self.gemini_api_key:
            self.gemini_api_key = os.getenv("GOOGLE_API_KEY")

        if not self.scan_api_key:
            self.scan_api_key = self.gemini_api_key

        if not self.chat_api_key:
            self.chat_api_key = self.gemini_api_key

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


# Global settings instance
settings = Settings()

# Supported upload types for the scanner
SUPPORTED_SCAN_TYPES = {
    "application/pdf": "pdf",
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/webp": "webp",
    "image/bmp": "bmp",
    "image/tiff": "tiff",
}

SUPPORTED_SCAN_LABELS = "PDF, PNG, JPG, WebP, BMP, TIFF"

# Languages the vault records for a scan; the pipeline always summarizes in English
DEFAULT_SUMMARY_LANGUAGE = "English"
