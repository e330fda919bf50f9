"""Helpers for multipart document uploads and downloads."""

import logging
import mimetypes
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from fastapi import Response, UploadFile

from core.exceptions import InvalidInputError, NotFoundError
from core.storage.local import LocalStorage
from core.utils.validators import unique_filename, validate_document

logger = logging.getLogger(__name__)


@dataclass
class StoredDocument:
    """A document held in storage together with the metadata recorded for it."""

    url: str
    file_name: str
    size: int
    mime_type: Optional[str] = None


async def store_document(file: UploadFile, storage: LocalStorage, subfolder: str) -> StoredDocument:
    """
    Validate and persist an uploaded resume or letter.

    Raises:
        InvalidInputError: If the file type or size is not accepted
    """
    content = await file.read()
    is_valid, error = validate_document(file.content_type, len(content))
    if not is_valid:
        raise InvalidInputError(error, details={"file": file.filename})

    original_name = file.filename or "document"
    stored_name = unique_filename(original_name)
    storage.save(content, stored_name, subfolder)

    return StoredDocument(
        url=storage.get_url(stored_name, subfolder),
        file_name=original_name,
        size=len(content),
        mime_type=file.content_type,
    )


def discard_document(storage: LocalStorage, document: StoredDocument) -> None:
    """Remove a stored file whose database record was never written."""
    if storage.delete_by_url(document.url):
        logger.info(f"Discarded orphaned upload {document.url}")


def document_response(storage: LocalStorage, document: StoredDocument) -> Response:
    """
    Stream a stored resume or letter back as an attachment.

    Raises:
        NotFoundError: If the record points at a file that is no longer stored
    """
    try:
        content = storage.read_by_url(document.url)
    except FileNotFoundError:
        logger.error(f"Stored document missing for {document.url}")
        raise NotFoundError("Document file not found")

    media_type = (
        document.mime_type
        or mimetypes.guess_type(document.file_name)[0]
        or "application/octet-stream"
    )
    quoted = quote(document.file_name)
    if quoted == document.file_name:
        disposition = f'attachment; filename="{document.file_name}"'
    else:
        disposition = f"attachment; filename*=utf-8''{quoted}"

    return Response(content=content, media_type=media_type, headers={"Content-Disposition": disposition})
