"""
LegalEase Smart Scanner FastAPI Backend

Upload a legal document (PDF or image), extract its text, get a plain-language
summary from Gemini and an optional ElevenLabs narration of that summary.
"""

__version__ = "1.0.0"
