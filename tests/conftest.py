"""
Test configuration and fixtures
"""

import io
from typing import Any, Dict, List, Optional, Sequence

import pytest
from httpx import AsyncClient, ASGITransport

from legalease.main import app
from legalease.models.schemas import UploadedDocument


@pytest.fixture
async def async_client():
    """Create an async HTTP client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_pdf_file():
    """Create a sample PDF with an embedded text layer."""
    from reportlab.pdfgen import canvas

    buffer = io.BytesIO()
    p = canvas.Canvas(buffer)
    p.drawString(100, 750, "RESIDENTIAL LEASE AGREEMENT")
    p.drawString(100, 730, "This lease is made between the Landlord and the Tenant.")
    p.drawString(100, 710, "The Tenant shall pay rent of Rs. 25,000 on the 5th of every month.")
    p.drawString(100, 690, "Late payment attracts a penalty of Rs. 500 per day.")
    p.drawString(100, 670, "Either party may terminate with 30 days written notice.")
    p.showPage()
    p.save()

    return buffer.getvalue()


@pytest.fixture
def blank_pdf_file():
    """Create a PDF without any text layer, like a scanned document."""
    from reportlab.pdfgen import canvas

    buffer = io.BytesIO()
    p = canvas.Canvas(buffer)
    p.rect(100, 600, 200, 100)
    p.showPage()
    p.save()

    return buffer.getvalue()


@pytest.fixture
def sample_png_file():
    """Create a small PNG image."""
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (200, 80), color="white").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_document():
    """Build an UploadedDocument the way the scan router does."""
    def _make(content: bytes = b"%PDF-1.4 lease", media_type: str = "application/pdf",
              file_name: str = "lease.pdf", size_bytes: Optional[int] = None) -> UploadedDocument:
        return UploadedDocument(
            content=content,
            declared_media_type=media_type,
            original_file_name=file_name,
            size_bytes=len(content) if size_bytes is None else size_bytes,
        )
    return _make


class FakeGeminiBackend:
    """
    Stand-in for GeminiBackend with scripted behaviour per model.

    A behaviour is a string (returned), an exception (raised), a callable
    taking the prompt, or a list of those consumed in order with the last
    entry repeating.
    """

    def __init__(self, behaviours: Dict[str, Any]):
        self.behaviours = {name: list(b) if isinstance(b, list) else [b] for name, b in behaviours.items()}
        self.calls: List[Dict[str, Any]] = []

    def generate(self, model_name: str, prompt: str, system_instruction: Optional[str] = None,
                 history: Sequence[Dict[str, str]] = (), max_output_tokens: Optional[int] = None,
                 timeout: Optional[float] = None) -> str:
        self.calls.append({
            "model": model_name,
            "prompt": prompt,
            "system_instruction": system_instruction,
            "history": list(history),
            "max_output_tokens": max_output_tokens,
        })

        queue = self.behaviours.get(model_name)
        if not queue:
            from legalease.exceptions import ErrorKind, GenerationError
            raise GenerationError(f"404 models/{model_name} is not found", kind=ErrorKind.MODEL_NOT_FOUND)

        behaviour = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(behaviour, Exception):
            raise behaviour
        if callable(behaviour):
            return behaviour(prompt)
        return behaviour

    def calls_for(self, model_name: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["model"] == model_name]


@pytest.fixture
def fake_backend_factory():
    """Create scripted Gemini backends."""
    return FakeGeminiBackend
