"""Upload validation, storage and bookkeeping for call recordings."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Any

from sqlalchemy.orm import selectinload

from sales_analyzer.config import get_settings
from sales_analyzer.constants.upload_constants import (
    ALLOWED_AUDIO_EXTENSIONS,
    ALLOWED_AUDIO_MIME_TYPES,
    EXTENSION_MIME_TYPES,
)
from sales_analyzer.data.db import get_session
from sales_analyzer.data.models import Upload
from sales_analyzer.services.object_storage import (
    StorageError,
    build_object_key,
    get_object_store,
)
from sales_analyzer.services.serialization import analysis_summary_to_dict, upload_to_dict

logger = logging.getLogger(__name__)

INVALID_TYPE_MESSAGE = "Invalid file type. Supported: MP3, WAV, M4A, AAC, OGG, FLAC, WebM"


def file_extension(filename: str) -> str:
    """Lower-case extension of ``filename`` ignoring a trailing ``.gz``."""
    name = filename.lower()
    if name.endswith(".gz"):
        name = name[: -len(".gz")]
    return PurePosixPath(name).suffix


def is_valid_audio_file(filename: str, content_type: str | None) -> bool:
    """A file is accepted when either its MIME type or its extension is allowed."""
    if content_type and content_type in ALLOWED_AUDIO_MIME_TYPES:
        return True
    return file_extension(filename) in ALLOWED_AUDIO_EXTENSIONS


def guess_mime_type(filename: str, recorded: str | None = None) -> str:
    if recorded:
        return recorded
    return EXTENSION_MIME_TYPES.get(file_extension(filename), "audio/mpeg")


def max_file_size() -> int:
    return get_settings().max_file_size


def validate_audio_file(filename: str, content_type: str | None, size: int) -> str | None:
    """Return an error message for an unacceptable file, or None."""
    if not is_valid_audio_file(filename, content_type):
        return INVALID_TYPE_MESSAGE
    limit = max_file_size()
    if size > limit:
        return f"File too large. Maximum size: {round(limit / 1024 / 1024)}MB"
    return None


def create_upload_record(
    user_id: str,
    filename: str,
    original_name: str,
    file_size: int,
    mime_type: str | None,
    file_url: str,
) -> dict[str, Any]:
    with get_session() as session:
        upload = Upload(
            user_id=user_id,
            filename=filename,
            original_name=original_name,
            file_size=file_size,
            mime_type=mime_type,
            file_url=file_url,
        )
        session.add(upload)
        session.flush()
        return upload_to_dict(upload)


def store_upload(
    user_id: str, filename: str, content_type: str | None, data: bytes
) -> dict[str, Any]:
    """Write the audio to the object store and record the upload.

    Raises:
        StorageError: If the object store rejects the write.
    """
    key = build_object_key(user_id, filename)
    get_object_store().put_object(key, data, content_type)
    return create_upload_record(
        user_id=user_id,
        filename=filename,
        original_name=filename,
        file_size=len(data),
        mime_type=content_type,
        file_url=key,
    )


def list_uploads_with_analyses(user_id: str) -> list[dict[str, Any]]:
    """All uploads of a user, newest first, each with its analysis summaries."""
    with get_session() as session:
        uploads = (
            session.query(Upload)
            .options(selectinload(Upload.analyses))
            .filter(Upload.user_id == user_id)
            .order_by(Upload.uploaded_at.desc())
            .all()
        )
        results = []
        for upload in uploads:
            data = upload_to_dict(upload)
            data["analyses"] = [analysis_summary_to_dict(a) for a in upload.analyses]
            results.append(data)
        return results


def delete_upload(user_id: str, upload_id: str) -> bool:
    """Delete an owned upload, its stored object and (by cascade) its analyses.

    Storage failures are logged and do not stop the database delete.

    Returns:
        False if the upload does not exist or belongs to someone else.
    """
    with get_session() as session:
        upload = (
            session.query(Upload).filter(Upload.id == upload_id, Upload.user_id == user_id).first()
        )
        if upload is None:
            return False
        try:
            get_object_store().delete_object(upload.file_url)
        except StorageError:
            logger.exception("Could not remove stored object for upload %s", upload_id)
        session.delete(upload)
    logger.info("Deleted upload %s", upload_id)
    return True


def delete_all_uploads(user_id: str) -> int:
    """Delete every upload the user owns, with stored objects and analyses.

    Returns:
        The number of upload rows removed.
    """
    with get_session() as session:
        uploads = session.query(Upload).filter(Upload.user_id == user_id).all()
        if not uploads:
            return 0
        logger.info("Deleting %d uploads for user %s", len(uploads), user_id)
        store = get_object_store()
        for upload in uploads:
            if upload.file_url and not store.delete_object(upload.file_url):
                logger.warning("Stored object %s may already be gone", upload.file_url)
        for upload in uploads:
            session.delete(upload)
        deleted = len(uploads)
    logger.info("Deleted %d uploads for user %s", deleted, user_id)
    return deleted
