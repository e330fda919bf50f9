"""Validation utilities for uploaded documents."""

import re
import uuid
from typing import Optional

from core.config import settings


def sanitize_filename(filename: str) -> str:
    """
    Sanitize filename by removing dangerous characters.

    Args:
        filename: Original filename

    Returns:
        Sanitized filename
    """
    # Remove path separators and other dangerous chars
    sanitized = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '', filename)

    # Replace spaces with underscores
    sanitized = sanitized.replace(' ', '_')

    # Limit length
    if len(sanitized) > 255:
        name, ext = sanitized.rsplit('.', 1) if '.' in sanitized else (sanitized, '')
        sanitized = name[:250] + ('.' + ext if ext else '')

    return sanitized or "file"


def unique_filename(filename: str) -> str:
    """Prefix a sanitized filename with a random token so uploads never collide."""
    return f"{uuid.uuid4().hex[:12]}-{sanitize_filename(filename)}"


def validate_document(
    content_type: Optional[str],
    size: int,
    allowed_types: Optional[list[str]] = None,
    max_size: Optional[int] = None,
) -> tuple[bool, Optional[str]]:
    """
    Validate an uploaded resume or letter.

    Args:
        content_type: MIME type reported by the client
        size: File size in bytes
        allowed_types: Accepted MIME types (defaults to ALLOWED_DOCUMENT_TYPES)
        max_size: Maximum size in bytes (defaults to MAX_UPLOAD_SIZE)

    Returns:
        Tuple of (is_valid, error_message)
    """
    allowed_types = allowed_types or settings.allowed_document_types
    max_size = max_size or settings.max_upload_size

    if content_type not in allowed_types:
        return False, "Invalid file type. Only PDF and Word documents are allowed."

    if size <= 0:
        return False, "Uploaded file is empty"

    if size > max_size:
        return False, f"File exceeds the maximum size of {max_size // (1024 * 1024)}MB"

    return True, None
