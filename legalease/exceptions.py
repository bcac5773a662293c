"""
Error taxonomy for the scan pipeline and the Gemini/ElevenLabs clients

Every stage raises a subclass of LegalEaseError carrying a structured
ErrorKind. HTTP status codes are derived from the kind only.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification attached to every stage failure"""
    INVALID_UPLOAD = "invalid_upload"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INVALID_CREDENTIAL = "invalid_credential"
    CONTENT_POLICY = "content_policy"
    QUOTA_EXCEEDED = "quota_exceeded"
    MODEL_NOT_FOUND = "model_not_found"
    UNREADABLE = "unreadable"
    UNKNOWN = "unknown"


STATUS_BY_KIND = {
    ErrorKind.INVALID_UPLOAD: 400,
    ErrorKind.CONTENT_POLICY: 400,
    ErrorKind.INVALID_CREDENTIAL: 401,
    ErrorKind.PAYLOAD_TOO_LARGE: 413,
    ErrorKind.UNREADABLE: 422,
    ErrorKind.QUOTA_EXCEEDED: 429,
    ErrorKind.MODEL_NOT_FOUND: 500,
    ErrorKind.UNKNOWN: 500,
}

# Failures after which the cached active model is dropped and re-probed
TRANSIENT_KINDS = frozenset({ErrorKind.MODEL_NOT_FOUND, ErrorKind.QUOTA_EXCEEDED})


def status_for_kind(kind: ErrorKind) -> int:
    """Map an error kind to its HTTP status code"""
    return STATUS_BY_KIND.get(kind, 500)


class LegalEaseError(Exception):
    """Base class for classified service errors"""

    default_kind = ErrorKind.UNKNOWN

    def __init__(self, detail: str, kind: Optional[ErrorKind] = None):
        super().__init__(detail)
        self.detail = detail
        self.kind = kind or self.default_kind
        # Filled in by the pipeline when the error leaves it
        self.processing_time: Optional[str] = None

    @property
    def status_code(self) -> int:
        return status_for_kind(self.kind)


class UploadValidationError(LegalEaseError):
    """Upload missing, of a disallowed type, or over the size ceiling"""
    default_kind = ErrorKind.INVALID_UPLOAD


class ExtractionError(LegalEaseError):
    """No readable text could be recovered from the document"""

    def __init__(self, detail: str, kind: Optional[ErrorKind] = None, extracted_text: Optional[str] = None):
        super().__init__(detail, kind)
        self.extracted_text = extracted_text


class UnreadableContentError(LegalEaseError):
    """Extraction ran but produced too little text to summarize"""
    default_kind = ErrorKind.UNREADABLE

    def __init__(self, detail: str, extracted_text: str = ""):
        super().__init__(detail)
        self.extracted_text = extracted_text


class GenerationError(LegalEaseError):
    """A single Gemini call failed"""


class SummarizationError(LegalEaseError):
    """The summarizer could not produce a summary"""


class SynthesisError(LegalEaseError):
    """ElevenLabs speech synthesis failed"""

    def __init__(
        self,
        detail: str,
        kind: Optional[ErrorKind] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(detail, kind)
        self.provider_status = status_code
        self.response_body = response_body


class UnclassifiedError(LegalEaseError):
    """Anything that escaped the stage-level classification"""
