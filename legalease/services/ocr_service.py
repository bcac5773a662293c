"""
Text extraction service for uploaded PDFs and images

PDFs are read through their embedded text layer first (PyPDF2). Scanned PDFs
and raster images go through Tesseract OCR.
"""

import io
import re
import time
import asyncio
from typing import Callable, List, Optional

import PyPDF2
import pytesseract
from PIL import Image, UnidentifiedImageError
from pdf2image import convert_from_bytes
from loguru import logger

from ..config import settings
from ..exceptions import ErrorKind, ExtractionError
from ..models.schemas import ExtractionMethod, ExtractionResult

ProgressCallback = Callable[[float], None]


def log_ocr_progress(progress: float) -> None:
    """Default OCR progress callback, logs at quarter steps"""
    pct = int(round(progress * 100))
    if pct % 25 == 0:
        logger.info(f"[OCR] Progress: {pct}%")


class TextExtractor:
    """Service for recovering text from PDFs and images"""

    PDF_MEDIA_TYPE = "application/pdf"

    def __init__(
        self,
        language: str = "eng",
        min_embedded_chars: int = 50,
        min_image_chars: int = 5,
        min_fallback_chars: int = 10,
        ocr_dpi: int = 200,
        ocr_max_pages: Optional[int] = 20,
        progress_callback: ProgressCallback = log_ocr_progress,
    ):
        self.language = language
        self.min_embedded_chars = min_embedded_chars
        self.min_image_chars = min_image_chars
        self.min_fallback_chars = min_fallback_chars
        self.ocr_dpi = ocr_dpi
        self.ocr_max_pages = ocr_max_pages
        self.progress_callback = progress_callback

    def is_pdf(self, media_type: Optional[str], file_name: Optional[str]) -> bool:
        """PDF if either the declared type or the filename says so"""
        if media_type == self.PDF_MEDIA_TYPE:
            return True
        return bool(file_name) and file_name.lower().endswith(".pdf")

    async def extract(self, content: bytes, media_type: str, file_name: str) -> ExtractionResult:
        """
        Extract text from a PDF or image.

        Raises:
            ExtractionError: when no readable text could be recovered.
        """
        if not content:
            raise ExtractionError("Empty file received", kind=ErrorKind.INVALID_UPLOAD)

        if self.is_pdf(media_type, file_name):
            return await self._extract_from_pdf(content)
        return await self._extract_from_image(content)

    async def _extract_from_pdf(self, content: bytes) -> ExtractionResult:
        try:
            text = await self._run_blocking(self._read_text_layer, content)
        except Exception as e:
            logger.error(f"[OCR] PDF text-layer parse failed: {e}")
            return await self._ocr_malformed_pdf(content, e)

        if len(text) >= self.min_embedded_chars:
            logger.info(f"[OCR] PDF text-layer extraction successful ({len(text)} chars)")
            return ExtractionResult(text=text, method=ExtractionMethod.EMBEDDED_TEXT)

        logger.info("[OCR] PDF has minimal text layer, attempting OCR on PDF pages...")
        try:
            ocr_text = await self._run_blocking(self._ocr_pdf, content)
        except Exception as e:
            logger.error(f"[OCR] PDF OCR failed: {e}")
            raise ExtractionError(f"Failed to extract text from PDF: {e}") from e

        return ExtractionResult(text=ocr_text, method=ExtractionMethod.OCR_PDF_FALLBACK)

    async def _ocr_malformed_pdf(self, content: bytes, parse_error: Exception) -> ExtractionResult:
        """Second-chance OCR for PDFs whose structure could not be parsed"""
        try:
            ocr_text = await self._run_blocking(self._ocr_pdf, content)
        except Exception as ocr_error:
            logger.error(f"[OCR] Fallback OCR also failed: {ocr_error}")
            ocr_text = ""

        if len(ocr_text) > self.min_fallback_chars:
            return ExtractionResult(text=ocr_text, method=ExtractionMethod.OCR_PDF_FALLBACK)

        raise ExtractionError(f"Failed to extract text from PDF: {parse_error}") from parse_error

    async def _extract_from_image(self, content: bytes) -> ExtractionResult:
        try:
            text = await self._run_blocking(self._ocr_image, content)
        except UnidentifiedImageError as e:
            logger.warning(f"[OCR] Upload is not a decodable image: {e}")
            raise ExtractionError(
                "Failed to extract text from image: No readable text found in image",
                kind=ErrorKind.UNREADABLE,
                extracted_text="",
            ) from e
        except Exception as e:
            logger.error(f"[OCR] Image OCR failed: {e}")
            raise ExtractionError(f"Failed to extract text from image: {e}") from e

        if len(text) < self.min_image_chars:
            raise ExtractionError(
                "Failed to extract text from image: No readable text found in image",
                kind=ErrorKind.UNREADABLE,
                extracted_text=text,
            )

        logger.info(f"[OCR] Image OCR successful ({len(text)} chars)")
        return ExtractionResult(text=text, method=ExtractionMethod.OCR_IMAGE)

    async def _run_blocking(self, func, *args):
        # PyPDF2, poppler and tesseract are all blocking
        return await asyncio.get_event_loop().run_in_executor(None, func, *args)

    def _read_text_layer(self, content: bytes) -> str:
        """Read the embedded text layer of a PDF"""
        reader = PyPDF2.PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]
        return self._clean_extracted_text("\n".join(pages))

    def _ocr_pdf(self, content: bytes) -> str:
        """Rasterize PDF pages and OCR each of them"""
        logger.info("[OCR] Running Tesseract OCR on PDF...")
        start_time = time.time()

        kwargs = {"dpi": self.ocr_dpi}
        if self.ocr_max_pages:
            kwargs["last_page"] = self.ocr_max_pages
        pages = convert_from_bytes(content, **kwargs)

        texts = self._recognize_images(pages)

        elapsed = time.time() - start_time
        text = self._clean_extracted_text("\n\n".join(texts))
        logger.info(f"[OCR] Tesseract completed {len(pages)} page(s) in {elapsed:.1f}s ({len(text)} chars)")
        return text

    def _ocr_image(self, content: bytes) -> str:
        """OCR a single raster image"""
        logger.info("[OCR] Running Tesseract OCR on image...")
        start_time = time.time()

        with Image.open(io.BytesIO(content)) as image:
            image.load()
            texts = self._recognize_images([image])

        elapsed = time.time() - start_time
        text = self._clean_extracted_text("\n".join(texts))
        logger.info(f"[OCR] Tesseract completed in {elapsed:.1f}s ({len(text)} chars)")
        return text

    def _recognize_images(self, images: List[Image.Image]) -> List[str]:
        total = len(images)
        self._report_progress(0.0)
        texts = []
        for index, image in enumerate(images, start=1):
            texts.append(pytesseract.image_to_string(image, lang=self.language))
            self._report_progress(index / total if total else 1.0)
        return texts

    def _report_progress(self, progress: float) -> None:
        try:
            self.progress_callback(progress)
        except Exception as e:
            # Progress is a monitoring aid only
            logger.debug(f"[OCR] Progress callback failed: {e}")

    @staticmethod
    def _clean_extracted_text(text: str) -> str:
        """Normalize whitespace in extracted text"""
        if not text:
            return ""
        text = re.sub(r"[ \t]+\n", "\n", text)
        text = re.sub(r"\n{3,}", "\n\n", text)
        return text.strip()


# Global text extractor instance
text_extractor = TextExtractor(
    language=settings.ocr_language,
    min_fallback_chars=settings.min_readable_chars,
    ocr_dpi=settings.ocr_dpi,
    ocr_max_pages=settings.ocr_max_pages,
)
