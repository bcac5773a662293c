"""
Test the error taxonomy and HTTP status mapping
"""

import pytest

from legalease.exceptions import (
    ErrorKind,
    ExtractionError,
    LegalEaseError,
    SynthesisError,
    TRANSIENT_KINDS,
    UnclassifiedError,
    UnreadableContentError,
    UploadValidationError,
    status_for_kind,
)
from legalease.models.requests import ErrorResponse


@pytest.mark.parametrize("kind,status", [
    (ErrorKind.INVALID_UPLOAD, 400),
    (ErrorKind.CONTENT_POLICY, 400),
    (ErrorKind.INVALID_CREDENTIAL, 401),
    (ErrorKind.PAYLOAD_TOO_LARGE, 413),
    (ErrorKind.UNREADABLE, 422),
    (ErrorKind.QUOTA_EXCEEDED, 429),
    (ErrorKind.MODEL_NOT_FOUND, 500),
    (ErrorKind.UNKNOWN, 500),
])
def test_status_for_kind(kind, status):
    assert status_for_kind(kind) == status


def test_transient_kinds():
    assert TRANSIENT_KINDS == {ErrorKind.MODEL_NOT_FOUND, ErrorKind.QUOTA_EXCEEDED}


def test_default_kinds():
    assert UploadValidationError("No file").kind == ErrorKind.INVALID_UPLOAD
    assert UnreadableContentError("Nothing", extracted_text="..").status_code == 422
    assert ExtractionError("Failed").kind == ErrorKind.UNKNOWN
    assert UnclassifiedError("boom").status_code == 500
    assert LegalEaseError("x", kind=ErrorKind.QUOTA_EXCEEDED).status_code == 429


def test_synthesis_error_keeps_provider_response():
    error = SynthesisError("ElevenLabs API returned 503: busy", status_code=503, response_body="busy")

    assert error.provider_status == 503
    assert error.response_body == "busy"
    assert error.status_code == 500


def test_error_response_uses_camel_case():
    content = ErrorResponse(error="Could not extract", processing_time="0.4s", extracted_text="ab").to_content()

    assert content == {
        "success": False,
        "error": "Could not extract",
        "processingTime": "0.4s",
        "extractedText": "ab",
    }
