"""
Test the scan pipeline stage sequence
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from legalease.exceptions import (
    ErrorKind,
    ExtractionError,
    SummarizationError,
    SynthesisError,
    UnclassifiedError,
    UnreadableContentError,
    UploadValidationError,
)
from legalease.models.schemas import (
    ExtractionMethod,
    ExtractionResult,
    NarrationResult,
    SummaryResult,
)
from legalease.services.scan_service import ScanPipeline, extracted_text_of


MAX_BYTES = 10 * 1024 * 1024
LEASE_TEXT = "RESIDENTIAL LEASE AGREEMENT. The Tenant shall pay rent monthly."


@pytest.fixture
def extractor():
    extractor = MagicMock()
    extractor.extract = AsyncMock(return_value=ExtractionResult(text=LEASE_TEXT, method=ExtractionMethod.EMBEDDED_TEXT))
    return extractor


@pytest.fixture
def summarizer():
    summarizer = MagicMock()
    summarizer.summarize = AsyncMock(return_value=SummaryResult(
        summary_text="• **Obligations**: The tenant pays rent monthly.",
        model_identifier="gemini-2.5-flash",
    ))
    return summarizer


@pytest.fixture
def narrator():
    narrator = MagicMock()
    narrator.enabled = True
    narrator.synthesize = AsyncMock(return_value=NarrationResult(
        audio_bytes=b"mp3",
        encoded_audio="bXAz",
        mime_type="audio/mpeg",
        audio_path="/uploads/audio/scan_1_abcd1234.mp3",
    ))
    return narrator


@pytest.fixture
def pipeline(extractor, summarizer, narrator):
    return ScanPipeline(extractor, summarizer, narrator, max_file_size_bytes=MAX_BYTES)


class TestScanPipeline:
    """Test the stage sequence and its failure semantics."""

    async def test_full_scan(self, pipeline, extractor, summarizer, narrator, make_document):
        result = await pipeline.run_pipeline(make_document())

        assert result.success is True
        assert result.extraction.text == LEASE_TEXT
        assert result.summary.model_identifier == "gemini-2.5-flash"
        assert result.narration.audio_path == "/uploads/audio/scan_1_abcd1234.mp3"
        assert result.file_name == "lease.pdf"
        assert result.language == "English"
        assert result.processing_time.endswith("s")
        extractor.extract.assert_awaited_once_with(b"%PDF-1.4 lease", "application/pdf", "lease.pdf")
        summarizer.summarize.assert_awaited_once_with(LEASE_TEXT)
        narrator.synthesize.assert_awaited_once_with("• **Obligations**: The tenant pays rent monthly.")

    async def test_missing_upload(self, pipeline, extractor):
        with pytest.raises(UploadValidationError) as exc_info:
            await pipeline.run_pipeline(None)

        assert exc_info.value.detail == "No file uploaded. Please upload a PDF or image file."
        assert exc_info.value.status_code == 400
        extractor.extract.assert_not_awaited()

    async def test_invalid_type(self, pipeline, extractor, make_document):
        with pytest.raises(UploadValidationError) as exc_info:
            await pipeline.run_pipeline(make_document(b"hello", "text/plain", "notes.txt"))

        assert exc_info.value.detail == "Invalid file type: text/plain. Allowed: PDF, PNG, JPG, WebP, BMP, TIFF"
        assert exc_info.value.status_code == 400
        extractor.extract.assert_not_awaited()

    async def test_type_is_checked_before_size(self, pipeline, make_document):
        with pytest.raises(UploadValidationError) as exc_info:
            await pipeline.run_pipeline(make_document(b"x", "text/plain", "big.txt", size_bytes=MAX_BYTES + 1))

        assert exc_info.value.kind == ErrorKind.INVALID_UPLOAD

    async def test_too_large(self, pipeline, extractor, make_document):
        with pytest.raises(UploadValidationError) as exc_info:
            await pipeline.run_pipeline(make_document(size_bytes=MAX_BYTES + 1))

        error = exc_info.value
        assert error.kind == ErrorKind.PAYLOAD_TOO_LARGE
        assert error.status_code == 413
        assert error.detail == "File too large. Maximum size is 10 MB."
        assert error.processing_time.endswith("s")
        extractor.extract.assert_not_awaited()

    async def test_exactly_at_limit_is_accepted(self, pipeline, make_document):
        result = await pipeline.run_pipeline(make_document(size_bytes=MAX_BYTES))
        assert result.success is True

    async def test_unreadable_text(self, pipeline, extractor, summarizer, make_document):
        extractor.extract.return_value = ExtractionResult(text="  .. ", method=ExtractionMethod.OCR_PDF_FALLBACK)

        with pytest.raises(UnreadableContentError) as exc_info:
            await pipeline.run_pipeline(make_document())

        error = exc_info.value
        assert error.status_code == 422
        assert error.detail == "Could not extract readable text from the document."
        assert extracted_text_of(error) == "  .. "
        summarizer.summarize.assert_not_awaited()

    async def test_extraction_failure(self, pipeline, extractor, summarizer, make_document):
        extractor.extract.side_effect = ExtractionError(
            "Failed to extract text from image: No readable text found in image",
            kind=ErrorKind.UNREADABLE,
            extracted_text="ab",
        )

        with pytest.raises(ExtractionError) as exc_info:
            await pipeline.run_pipeline(make_document(media_type="image/png", file_name="photo.png"))

        assert exc_info.value.status_code == 422
        assert extracted_text_of(exc_info.value) == "ab"
        summarizer.summarize.assert_not_awaited()

    async def test_summarization_failure(self, pipeline, summarizer, narrator, make_document):
        summarizer.summarize.side_effect = SummarizationError(
            "Gemini summarization failed: quota", kind=ErrorKind.QUOTA_EXCEEDED
        )

        with pytest.raises(SummarizationError) as exc_info:
            await pipeline.run_pipeline(make_document())

        assert exc_info.value.status_code == 429
        assert exc_info.value.processing_time.endswith("s")
        narrator.synthesize.assert_not_awaited()

    async def test_narration_failure_still_succeeds(self, pipeline, narrator, make_document):
        narrator.synthesize.side_effect = SynthesisError(
            "ElevenLabs API returned 500: internal error", status_code=500, response_body="internal error"
        )

        result = await pipeline.run_pipeline(make_document())

        assert result.success is True
        assert result.narration is None

    async def test_narration_disabled(self, pipeline, narrator, make_document):
        narrator.enabled = False

        result = await pipeline.run_pipeline(make_document())

        assert result.narration is None
        narrator.synthesize.assert_not_awaited()

    async def test_unexpected_error_is_unclassified(self, pipeline, extractor, make_document):
        extractor.extract.side_effect = RuntimeError("tesseract crashed")

        with pytest.raises(UnclassifiedError) as exc_info:
            await pipeline.run_pipeline(make_document())

        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "tesseract crashed"
        assert exc_info.value.processing_time is not None
