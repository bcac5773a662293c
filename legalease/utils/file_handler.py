"""
File handling utilities for the LegalEase Scanner
"""

from typing import Optional

from fastapi import UploadFile
from loguru import logger

from ..config import settings, SUPPORTED_SCAN_TYPES, SUPPORTED_SCAN_LABELS
from ..exceptions import ErrorKind, UploadValidationError
from ..models.schemas import UploadedDocument


class FileHandler:
    """Utility class for upload inspection"""

    @staticmethod
    def is_supported_scan_type(content_type: Optional[str]) -> bool:
        """Check if the upload type can be scanned"""
        return content_type in SUPPORTED_SCAN_TYPES

    @staticmethod
    def validate_file_size(file_size: int, max_size_bytes: Optional[int] = None) -> bool:
        """Validate file size against limits"""
        max_bytes = max_size_bytes or settings.max_file_size_bytes
        return file_size <= max_bytes

    @staticmethod
    def format_file_size(size_bytes: float) -> str:
        """Format file size in human-readable format"""
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size_bytes < 1024.0:
                return f"{size_bytes:.1f} {unit}"
            size_bytes /= 1024.0
        return f"{size_bytes:.1f} TB"

    @staticmethod
    async def read_upload(file: Optional[UploadFile], max_size_bytes: Optional[int] = None) -> Optional[UploadedDocument]:
        """
        Read an upload into memory.

        At most one byte past the ceiling is read, enough for the size gate
        to reject the file without buffering all of it.
        """
        if file is None:
            return None

        max_bytes = max_size_bytes or settings.max_file_size_bytes
        content = await file.read(max_bytes + 1)
        return UploadedDocument(
            content=content,
            declared_media_type=file.content_type or "",
            original_file_name=file.filename or "",
            size_bytes=len(content),
        )


class FileValidator:
    """Upload gate for the scan pipeline"""

    @staticmethod
    def validate_scan_upload(document: Optional[UploadedDocument], max_size_bytes: Optional[int] = None) -> UploadedDocument:
        """
        Reject missing, mistyped and oversized uploads.

        Raises:
            UploadValidationError: with kind invalid_upload or payload_too_large.
        """
        if document is None:
            raise UploadValidationError("No file uploaded. Please upload a PDF or image file.")

        if not FileHandler.is_supported_scan_type(document.declared_media_type):
            raise UploadValidationError(
                f"Invalid file type: {document.declared_media_type or 'unknown'}. Allowed: {SUPPORTED_SCAN_LABELS}"
            )

        max_bytes = max_size_bytes or settings.max_file_size_bytes
        if not FileHandler.validate_file_size(document.size_bytes, max_bytes):
            raise UploadValidationError(
                f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB.",
                kind=ErrorKind.PAYLOAD_TOO_LARGE,
            )

        logger.info(
            f"Upload validation passed: {document.original_file_name} "
            f"({FileHandler.format_file_size(document.size_bytes)}, {document.declared_media_type})"
        )
        return document
