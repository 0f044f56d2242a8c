"""Browser-direct multipart uploads for large recordings.

The client asks for a multipart upload, PUTs each chunk to a presigned URL,
then completes the upload here, which records it and starts a parameter
analysis. All steps share one endpoint selected by ``action``.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import APIRouter, BackgroundTasks

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import ApiError, Forbidden, InvalidRequest
from sales_analyzer.api.routes.analyze import start_analyses
from sales_analyzer.api.schemas.uploads import CompletedPart, LargeUploadRequest
from sales_analyzer.models.enums import AnalysisType
from sales_analyzer.services.analysis_runner import parameters_or_default
from sales_analyzer.services.object_storage import (
    StorageError,
    build_object_key,
    get_object_store,
    user_key_prefix,
)
from sales_analyzer.services.uploads import (
    INVALID_TYPE_MESSAGE,
    create_upload_record,
    is_valid_audio_file,
    max_file_size,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload-large", tags=["uploads"])


def _require_own_key(user_id: str, key: str | None, upload_id: str | None) -> str:
    if not key or not upload_id:
        raise InvalidRequest("Key and upload ID are required")
    if not key.startswith(user_key_prefix(user_id)):
        raise Forbidden("Access denied")
    return key


def _start_upload(user_id: str, payload: LargeUploadRequest) -> dict[str, Any]:
    if not payload.file_name:
        raise InvalidRequest("File name is required")
    if not is_valid_audio_file(payload.file_name, payload.content_type):
        raise InvalidRequest(INVALID_TYPE_MESSAGE)
    key = build_object_key(user_id, payload.file_name)
    try:
        upload_id = get_object_store().create_multipart_upload(key, payload.content_type)
    except StorageError as exc:
        logger.exception("Error starting multipart upload for %s", key)
        raise ApiError("Failed to start upload") from exc
    return {"success": True, "uploadId": upload_id, "key": key}


def _get_upload_urls(user_id: str, payload: LargeUploadRequest) -> dict[str, Any]:
    key = _require_own_key(user_id, payload.key, payload.upload_id)
    if not isinstance(payload.parts, int) or payload.parts < 1:
        raise InvalidRequest("Number of parts must be a positive integer")
    try:
        urls = get_object_store().presign_part_urls(key, payload.upload_id, payload.parts)
    except StorageError as exc:
        logger.exception("Error getting signed URLs for %s", key)
        raise ApiError("Failed to get upload URLs") from exc
    return {"success": True, "urls": urls}


def _complete_upload(
    user_id: str, payload: LargeUploadRequest, background_tasks: BackgroundTasks
) -> dict[str, Any]:
    key = _require_own_key(user_id, payload.key, payload.upload_id)
    if not payload.file_name:
        raise InvalidRequest("File name is required")
    if not isinstance(payload.parts, list) or not payload.parts:
        raise InvalidRequest("Uploaded parts are required")
    file_size = payload.file_size or 0
    limit = max_file_size()
    if file_size > limit:
        raise InvalidRequest(f"File too large. Maximum size: {round(limit / 1024 / 1024)}MB")

    started = time.monotonic()
    parts: list[CompletedPart] = payload.parts
    try:
        get_object_store().complete_multipart_upload(
            key, payload.upload_id, [p.as_store_part() for p in parts]
        )
    except StorageError as exc:
        logger.exception("Error completing multipart upload for %s", key)
        raise ApiError("Failed to complete upload") from exc

    original_name = payload.file_name.removesuffix(".gz")
    upload = create_upload_record(
        user_id=user_id,
        filename=payload.file_name,
        original_name=original_name,
        file_size=file_size,
        mime_type=payload.original_content_type,
        file_url=key,
    )

    custom_parameters = (
        [p.model_dump() for p in payload.custom_parameters] if payload.custom_parameters else None
    )
    analyses, _ = start_analyses(
        background_tasks,
        user_id,
        [upload["id"]],
        AnalysisType.PARAMETERS,
        custom_parameters=parameters_or_default(custom_parameters),
    )
    analysis_started = bool(analyses)
    duration = int((time.monotonic() - started) * 1000)

    return {
        "success": True,
        "message": (
            "File uploaded and analysis started." if analysis_started else "File uploaded successfully."
        ),
        "results": [
            {
                "id": upload["id"],
                "filename": payload.file_name,
                "success": True,
                "uploadId": upload["id"],
                "uploadDuration": duration,
            }
        ],
        "summary": {
            "total": 1,
            "successful": 1,
            "failed": 0,
            "totalUploadDuration": duration,
            "overallDuration": duration,
        },
        "analysisStarted": analysis_started,
        "analyses": analyses,
        "upload": upload,
    }


def _abort_upload(user_id: str, payload: LargeUploadRequest) -> dict[str, Any]:
    key = _require_own_key(user_id, payload.key, payload.upload_id)
    try:
        get_object_store().abort_multipart_upload(key, payload.upload_id)
    except StorageError as exc:
        logger.exception("Error aborting multipart upload for %s", key)
        raise ApiError("Failed to abort upload") from exc
    return {"success": True}


@router.post("")
def upload_large(
    payload: LargeUploadRequest, background_tasks: BackgroundTasks, user: CurrentUser
) -> dict[str, Any]:
    """Dispatch one step of the multipart upload flow.

    Actions: ``start-upload``, ``get-upload-urls``, ``complete-upload``, ``abort-upload``.
    """
    user_id = user["id"]
    if payload.action == "start-upload":
        return _start_upload(user_id, payload)
    if payload.action == "get-upload-urls":
        return _get_upload_urls(user_id, payload)
    if payload.action == "complete-upload":
        return _complete_upload(user_id, payload, background_tasks)
    if payload.action == "abort-upload":
        return _abort_upload(user_id, payload)
    raise InvalidRequest("Invalid action")
