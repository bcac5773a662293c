"""
Scan pipeline: upload gate, text extraction, summarization and narration

A scan walks a fixed sequence of stages:

    VALIDATE_UPLOAD -> EXTRACT -> VALIDATE_TEXT -> SUMMARIZE -> NARRATE -> RESPOND

Every stage failure is terminal except narration, which only ever downgrades
the response to one without audio. Each failure leaves the pipeline as a
LegalEaseError carrying its ErrorKind and the elapsed processing time.
"""

import time
from typing import Optional

from loguru import logger

from ..config import settings, DEFAULT_SUMMARY_LANGUAGE
from ..exceptions import (
    ExtractionError,
    LegalEaseError,
    SynthesisError,
    UnclassifiedError,
    UnreadableContentError,
)
from ..models.schemas import (
    ExtractionResult,
    NarrationResult,
    PipelineResponse,
    SummaryResult,
    UploadedDocument,
)
from ..utils.file_handler import FileValidator
from .gemini_service import LegalSummarizer, scan_summarizer
from .ocr_service import TextExtractor, text_extractor
from .tts_service import TTSService, tts_service


def format_elapsed(start_time: float) -> str:
    """Seconds since start_time with one decimal and an 's' suffix"""
    return f"{time.time() - start_time:.1f}s"


class ScanPipeline:
    """Orchestrates one document scan end to end"""

    def __init__(
        self,
        extractor: TextExtractor,
        summarizer: LegalSummarizer,
        narrator: TTSService,
        max_file_size_bytes: int,
        min_readable_chars: int = 10,
    ):
        self.extractor = extractor
        self.summarizer = summarizer
        self.narrator = narrator
        self.max_file_size_bytes = max_file_size_bytes
        self.min_readable_chars = min_readable_chars

    async def run_pipeline(self, document: Optional[UploadedDocument]) -> PipelineResponse:
        """
        Run a scan on an uploaded document.

        Args:
            document: The upload, or None when the request carried no file.

        Returns:
            PipelineResponse with extraction, summary and optional narration.

        Raises:
            LegalEaseError: classified failure of any terminal stage, with
                processing_time set.
        """
        start_time = time.time()
        try:
            return await self._run_stages(document, start_time)
        except LegalEaseError as e:
            e.processing_time = format_elapsed(start_time)
            logger.error(f"[Scan] Failed after {e.processing_time} ({e.kind.value}): {e.detail}")
            raise
        except Exception as e:
            error = UnclassifiedError(str(e) or e.__class__.__name__)
            error.processing_time = format_elapsed(start_time)
            logger.exception(f"[Scan] Unexpected failure after {error.processing_time}: {e}")
            raise error from e

    async def _run_stages(self, document: Optional[UploadedDocument], start_time: float) -> PipelineResponse:
        document = FileValidator.validate_scan_upload(document, self.max_file_size_bytes)
        logger.info(
            f"[Scan] Processing: {document.original_file_name} "
            f"({document.declared_media_type}, {document.size_bytes / 1024:.1f} KB)"
        )

        extraction = await self._extract(document)
        self._validate_text(extraction)

        summary = await self._summarize(extraction)
        narration = await self._narrate(summary)

        response = PipelineResponse(
            extraction=extraction,
            summary=summary,
            narration=narration,
            file_name=document.original_file_name,
            language=DEFAULT_SUMMARY_LANGUAGE,
            processing_time=format_elapsed(start_time),
        )
        logger.info(
            f"[Scan] Complete in {response.processing_time} "
            f"(method: {extraction.method.value}, model: {summary.model_identifier}, "
            f"audio: {'yes' if narration else 'no'})"
        )
        return response

    async def _extract(self, document: UploadedDocument) -> ExtractionResult:
        extraction = await self.extractor.extract(
            document.content,
            document.declared_media_type,
            document.original_file_name,
        )
        logger.info(f"[Scan] Extracted {len(extraction.text)} chars via {extraction.method.value}")
        return extraction

    def _validate_text(self, extraction: ExtractionResult) -> None:
        if len(extraction.text.strip()) < self.min_readable_chars:
            raise UnreadableContentError(
                "Could not extract readable text from the document.",
                extracted_text=extraction.text,
            )

    async def _summarize(self, extraction: ExtractionResult) -> SummaryResult:
        return await self.summarizer.summarize(extraction.text)

    async def _narrate(self, summary: SummaryResult) -> Optional[NarrationResult]:
        if not self.narrator.enabled:
            logger.info("[Scan] Narration skipped, no ElevenLabs key configured")
            return None

        try:
            return await self.narrator.synthesize(summary.summary_text)
        except SynthesisError as e:
            logger.warning(f"[Scan] Narration failed, continuing without audio: {e.detail}")
            return None


def extracted_text_of(error: LegalEaseError) -> Optional[str]:
    """Partial text attached to extraction failures, if any"""
    if isinstance(error, (ExtractionError, UnreadableContentError)):
        return error.extracted_text
    return None


# Global scan pipeline instance
scan_pipeline = ScanPipeline(
    extractor=text_extractor,
    summarizer=scan_summarizer,
    narrator=tts_service,
    max_file_size_bytes=settings.max_file_size_bytes,
    min_readable_chars=settings.min_readable_chars,
)
