"""
LegalEase Scanner FastAPI Application

Upload a legal document (PDF or image), get its text through embedded-text
extraction or Tesseract OCR, a plain-language Gemini summary and, when
ElevenLabs is configured, narrated audio of that summary. Also serves the
legal chat assistant.
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from loguru import logger
import uvicorn

from . import __version__
from .config import settings, SUPPORTED_SCAN_LABELS
from .routers import health_router, scan_router, chat_router, audio_router
from .services import scan_summarizer, chat_assistant, tts_service
from .models.requests import ErrorResponse


# Application lifespan management
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager for startup and shutdown events
    """
    logger.info("Starting LegalEase Scanner API...")

    try:
        logger.info("🚀 Starting service initialization...")

        logger.info("🔄 Initializing Text-to-Speech service...")
        await tts_service.initialize()

        logger.info("🔄 Probing Gemini models for the scanner...")
        await scan_summarizer.initialize()

        logger.info("🔄 Probing Gemini models for the chat assistant...")
        await chat_assistant.initialize()

        logger.info("🎉 SERVICE INITIALIZATION COMPLETE!")
        logger.info("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
        logger.info("📊 SERVICE STATUS SUMMARY:")
        logger.info(f"   📄 Scanner model: {scan_summarizer.active_model or '❌ None (check SCAN_API_KEY)'}")
        logger.info(f"   💬 Chat model: {chat_assistant.active_model or '❌ None (check CHAT_API_KEY)'}")
        logger.info(f"   🔊 Narration: {'✅ Enabled' if tts_service.enabled else '⏭️ Disabled (no ELEVEN_LABS_API_KEY)'}")
        logger.info("━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━")
        logger.info("🎯 API is ready to process requests!")

    except Exception as e:
        logger.error(f"Failed to initialize services: {e}")
        # Continue startup even if some services fail

    yield

    logger.info("Shutting down LegalEase Scanner API...")


# Create FastAPI application
app = FastAPI(
    title="LegalEase Scanner API",
    description="""
    Turns legal documents into plain-language summaries.

    ## Features

    * **Document Scanning**: Upload a PDF or a photo of a document
    * **Text Extraction**: Embedded PDF text first, Tesseract OCR for scans and images
    * **Legal Summaries**: Key clauses, obligations, risks, dates, penalties and rights via Gemini
    * **Narration**: Optional ElevenLabs audio of every summary
    * **Legal Chat**: A legal-only assistant with conversation history

    ## Supported File Types

    **Documents**: PDF, PNG, JPG, WebP, BMP, TIFF (up to 10 MB)
    **Output**: JSON summary, MP3 narration
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# Configure logging
logger.add(
    settings.log_file,
    rotation="1 day",
    retention="30 days",
    level=settings.log_level,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{function}:{line} | {message}"
)

# Add middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.allowed_hosts != ["*"]:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking"""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    with logger.contextualize(request_id=request_id):
        logger.info(f"Request started: {request.method} {request.url}")

        response = await call_next(request)

        process_time = time.time() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(process_time)

        logger.info(
            f"Request completed: {request.method} {request.url} "
            f"(status: {response.status_code}, time: {process_time:.3f}s)"
        )

    return response


# Exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format"""
    request_id = getattr(request.state, 'request_id', None)

    error_response = ErrorResponse(error=str(exc.detail), request_id=request_id)

    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.to_content()
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    request_id = getattr(request.state, 'request_id', None)

    error_details = []
    for error in exc.errors():
        error_details.append({
            "field": " -> ".join(str(x) for x in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    error_response = ErrorResponse(
        error="Request validation failed",
        details={"validation_errors": error_details},
        request_id=request_id
    )

    logger.warning(f"Validation Error: {error_details}")

    return JSONResponse(
        status_code=422,
        content=error_response.to_content()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions"""
    request_id = getattr(request.state, 'request_id', None)

    error_response = ErrorResponse(
        error="An unexpected error occurred",
        details={"error_type": exc.__class__.__name__} if settings.debug_mode else None,
        request_id=request_id
    )

    logger.opt(exception=exc).error(f"Unexpected error: {exc}")

    return JSONResponse(
        status_code=500,
        content=error_response.to_content()
    )


# Include routers
app.include_router(health_router)
app.include_router(scan_router)
app.include_router(chat_router)
app.include_router(audio_router)

# Narration audio is served statically
Path(settings.audio_directory).mkdir(parents=True, exist_ok=True)
app.mount(settings.audio_url_prefix, StaticFiles(directory=settings.audio_directory), name="audio")


# Root endpoint
@app.get("/", tags=["root"])
async def root():
    """
    Root endpoint with API information
    """
    return {
        "name": "LegalEase Scanner API",
        "version": __version__,
        "description": "Plain-language summaries and narration for legal documents",
        "docs_url": "/docs",
        "health_check": "/api/health",
        "endpoints": {
            "scan": "/api/scan",
            "chat": "/api/chat",
            "generate_audio": "/api/generate-audio",
            "health": "/api/health",
            "audio_files": f"{settings.audio_url_prefix}/{{file}}"
        },
        "supported_formats": {
            "input": SUPPORTED_SCAN_LABELS.split(", "),
            "output": ["JSON summary", "MP3 audio narration"]
        },
        "limits": {
            "max_file_size_mb": settings.max_file_size_mb,
            "max_ocr_pages": settings.ocr_max_pages,
            "max_summary_input_chars": settings.summary_max_chars,
            "max_narration_chars": settings.tts_max_chars
        }
    }


# Development server
if __name__ == "__main__":
    uvicorn.run(
        "legalease.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug_mode,
        log_level=settings.log_level.lower(),
        access_log=True
    )
