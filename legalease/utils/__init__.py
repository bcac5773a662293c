"""
Utilities package initialization
"""

from .file_handler import FileHandler, FileValidator

__all__ = [
    "FileHandler",
    "FileValidator",
]
