"""
File handling utilities
"""

import os
import uuid
from pathlib import Path


def ensure_directory(path: str) -> Path:
    """Ensure directory exists, create if not"""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_file_extension(filename: str) -> str:
    """Get file extension from filename"""
    return os.path.splitext(filename)[1].lower()


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage"""
    # Remove path components
    filename = os.path.basename(filename)
    # Replace spaces and special characters
    filename = "".join(c if c.isalnum() or c in ".-_" else "_" for c in filename)
    return filename


def temp_filename(original: str) -> str:
    """Unique name for a staged upload, keeping the original extension"""
    return f"upload_{uuid.uuid4().hex}{get_file_extension(sanitize_filename(original))}"


def detect_mime_type(content: bytes) -> str:
    """Sniff the MIME type of a buffer with libmagic"""
    import magic

    return magic.from_buffer(content, mime=True)
