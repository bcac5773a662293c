"""
Legal chat assistant router
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from loguru import logger

from ..exceptions import ErrorKind, LegalEaseError
from ..models.requests import ChatRequest, ChatResponse, ErrorResponse
from ..services.gemini_service import chat_assistant

router = APIRouter(prefix="/api", tags=["chat"])

CHAT_ERRORS = {
    ErrorKind.INVALID_CREDENTIAL: (401, "Invalid or missing API Key"),
    ErrorKind.QUOTA_EXCEEDED: (429, "Chat quota exceeded, try again later"),
}


def _error(status_code: int, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message, details=details).to_content(),
    )


@router.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest):
    """
    Ask the legal assistant a question.

    Only legal topics are answered. Earlier turns may be passed in `history`
    as `{role: "user" | "model", text}` or `{role, parts: [{text}]}`.
    """
    message = request.message
    if not isinstance(message, str) or not message.strip():
        return _error(400, "Invalid message format")

    logger.info(f"[Chat] Message: {message[:100]}{'...' if len(message) > 100 else ''}")

    try:
        reply, model_name = await chat_assistant.chat(message, request.history)
    except LegalEaseError as e:
        status_code, error_message = CHAT_ERRORS.get(e.kind, (500, "Failed to process request"))
        logger.error(f"[Chat] {error_message}: {e.detail}")
        return _error(status_code, error_message, details=e.detail)

    return ChatResponse(reply=reply, model=model_name)
