"""Direct (multipart form) upload routes for call recordings."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, File, Query, UploadFile

from sales_analyzer.api.dependencies import CurrentUser
from sales_analyzer.api.errors import ApiError, InvalidRequest, NotFound
from sales_analyzer.api.routes.analyze import start_analyses
from sales_analyzer.constants.upload_constants import MAX_FILES_PER_REQUEST
from sales_analyzer.models.enums import AnalysisType
from sales_analyzer.services.object_storage import StorageError
from sales_analyzer.services.uploads import (
    delete_all_uploads,
    delete_upload,
    list_uploads_with_analyses,
    store_upload,
    validate_audio_file,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["uploads"])


async def _process_file(user_id: str, file: UploadFile) -> dict[str, Any]:
    filename = file.filename or "upload"
    data = await file.read()
    logger.info("Processing file %s (%d bytes)", filename, len(data))

    error = validate_audio_file(filename, file.content_type, len(data))
    if error:
        return {"filename": filename, "success": False, "error": error}

    try:
        upload = store_upload(user_id, filename, file.content_type, data)
    except StorageError as exc:
        logger.exception("Error storing file %s", filename)
        return {"filename": filename, "success": False, "error": str(exc)}

    return {
        "id": upload["id"],
        "filename": filename,
        "size": len(data),
        "type": file.content_type,
        "success": True,
        "uploadedAt": upload["uploadedAt"],
    }


@router.post("")
async def upload_files(
    files: Annotated[list[UploadFile], File(description="Audio recordings to upload")],
    background_tasks: BackgroundTasks,
    user: CurrentUser,
) -> dict[str, Any]:
    """Store each valid recording and start a default analysis for them.

    Invalid files are reported per file and do not fail the request.

    Raises:
        InvalidRequest: No files, or more than the per-request limit (400).
    """
    if not files:
        raise InvalidRequest("No files provided")
    if len(files) > MAX_FILES_PER_REQUEST:
        raise InvalidRequest(f"Too many files. Maximum {MAX_FILES_PER_REQUEST} files per upload")

    results = [await _process_file(user["id"], f) for f in files]
    upload_ids = [r["id"] for r in results if r["success"]]
    successful = len(upload_ids)
    logger.info("Upload complete. Success: %d Failed: %d", successful, len(results) - successful)

    analyses: list[dict[str, Any]] = []
    if upload_ids:
        analyses, _ = start_analyses(
            background_tasks, user["id"], upload_ids, AnalysisType.DEFAULT
        )
    analysis_started = bool(analyses)

    return {
        "success": True,
        "message": (
            f"{successful} files uploaded and analysis started automatically"
            if analysis_started
            else f"{successful} files uploaded successfully"
        ),
        "results": results,
        "summary": {
            "total": len(files),
            "successful": successful,
            "failed": len(results) - successful,
        },
        "analysisStarted": analysis_started,
        "analyses": analyses,
    }


@router.get("")
def get_uploads(user: CurrentUser) -> dict[str, Any]:
    return {"success": True, "uploads": list_uploads_with_analyses(user["id"])}


@router.delete("")
def remove_upload(
    user: CurrentUser,
    upload_id: str | None = Query(None, alias="id"),
) -> dict[str, Any]:
    """Delete an upload, its stored audio and its analyses."""
    if not upload_id:
        raise InvalidRequest("Upload ID is required")
    try:
        deleted = delete_upload(user["id"], upload_id)
    except Exception as exc:
        logger.exception("Failed to delete upload %s", upload_id)
        raise ApiError("Failed to delete upload") from exc
    if not deleted:
        raise NotFound("Upload not found")
    return {"success": True, "message": "Upload successfully deleted"}


@router.delete("/all")
def remove_all_uploads(user: CurrentUser) -> dict[str, Any]:
    """Delete every upload of the caller together with stored audio and analyses."""
    try:
        deleted = delete_all_uploads(user["id"])
    except Exception as exc:
        logger.exception("Failed to delete all uploads for user %s", user["id"])
        raise ApiError("Failed to delete all uploads") from exc
    return {
        "success": True,
        "message": "All uploads deleted successfully" if deleted else "No uploads to delete",
        "deletedCount": deleted,
    }
