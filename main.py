"""
Main entry point for the LegalEase Scanner API
This file allows running the application with 'uvicorn main:app'
"""

from legalease.main import app

# Re-export the FastAPI app instance for uvicorn
__all__ = ["app"]
