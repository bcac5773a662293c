"""
Document scan router: upload a PDF or image and get a plain-language summary
"""

from typing import Optional

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
from loguru import logger

from ..exceptions import LegalEaseError
from ..models.requests import ScanResponse, ErrorResponse
from ..services.scan_service import scan_pipeline, extracted_text_of
from ..utils.file_handler import FileHandler

router = APIRouter(prefix="/api", tags=["scan"])


@router.post("/scan", response_model=ScanResponse, response_model_by_alias=True)
async def scan_document(document: Optional[UploadFile] = File(None)):
    """
    Upload a legal document and receive a plain-language summary.

    Accepts PDF and image uploads (PNG, JPG, WebP, BMP, TIFF) up to the
    configured size ceiling. The response contains:
    - The extracted text and how it was extracted
    - A bullet-point summary of clauses, obligations, risks, dates, penalties and rights
    - The Gemini model that wrote the summary
    - Narrated audio of the summary when ElevenLabs is configured
    """
    if document is not None:
        logger.info(f"[Scan] Received upload: {document.filename} ({document.content_type})")

    try:
        upload = await FileHandler.read_upload(document, scan_pipeline.max_file_size_bytes)
        result = await scan_pipeline.run_pipeline(upload)
    except LegalEaseError as e:
        error_response = ErrorResponse(
            error=e.detail,
            processing_time=e.processing_time,
            extracted_text=extracted_text_of(e),
        )
        return JSONResponse(status_code=e.status_code, content=error_response.to_content())
    finally:
        if document is not None:
            await document.close()

    return ScanResponse.from_pipeline(result)
