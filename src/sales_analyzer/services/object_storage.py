"""S3-compatible object storage (Cloudflare R2 or AWS S3) for call recordings.

``ObjectStore`` wraps a boto3 S3 client bound to one bucket. The process-wide
instance is built lazily by ``get_object_store()`` and can be replaced with
``set_object_store()`` (used by tests).
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from sales_analyzer.config import get_settings
from sales_analyzer.constants.upload_constants import (
    MULTIPART_UPLOAD_EXPIRY_HOURS,
    PRESIGNED_URL_EXPIRY_SECONDS,
)

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when the object store is misconfigured or a request fails."""


def build_object_key(user_id: str, file_name: str) -> str:
    """Key layout: ``uploads/<user_id>/<uuid>/<file_name>``."""
    return f"uploads/{user_id}/{uuid.uuid4()}/{file_name}"


def user_key_prefix(user_id: str) -> str:
    return f"uploads/{user_id}/"


class ObjectStore:
    """Thin wrapper over the boto3 S3 client for a single bucket."""

    def __init__(self, client: Any, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    @classmethod
    def from_settings(cls) -> ObjectStore:
        settings = get_settings()
        if not settings.r2_bucket_name:
            raise StorageError("Missing R2_BUCKET_NAME environment variable")
        client = boto3.client(
            "s3",
            endpoint_url=settings.object_store_endpoint,
            aws_access_key_id=settings.r2_access_key_id,
            aws_secret_access_key=settings.r2_secret_access_key,
            region_name="auto",
            config=Config(signature_version="s3v4"),
        )
        return cls(client, settings.r2_bucket_name)

    def put_object(self, key: str, body: bytes, content_type: str | None = None) -> None:
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=body, **extra)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to store object {key}: {exc}") from exc
        logger.info("Stored object %s (%d bytes)", key, len(body))

    def get_object_bytes(self, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"File not found in storage: {key}") from exc
        body = response.get("Body")
        if body is None:
            raise StorageError(f"File not found in storage: {key}")
        return body.read()

    def delete_object(self, key: str) -> bool:
        """Delete an object; failures are logged and reported as False."""
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError):
            logger.exception("Error deleting object %s", key)
            return False
        logger.info("Deleted object %s", key)
        return True

    def create_multipart_upload(self, key: str, content_type: str | None) -> str:
        """Start a multipart upload that the store may discard after 24 hours."""
        expires = datetime.now(UTC) + timedelta(hours=MULTIPART_UPLOAD_EXPIRY_HOURS)
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": key, "Expires": expires}
        if content_type:
            params["ContentType"] = content_type
        try:
            response = self.client.create_multipart_upload(**params)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to start multipart upload: {exc}") from exc
        return response["UploadId"]

    def presign_part_urls(self, key: str, upload_id: str, parts: int) -> list[str]:
        """Presigned PUT URLs for part numbers 1..parts, valid for one hour."""
        try:
            return [
                self.client.generate_presigned_url(
                    "upload_part",
                    Params={
                        "Bucket": self.bucket,
                        "Key": key,
                        "UploadId": upload_id,
                        "PartNumber": part_number,
                    },
                    ExpiresIn=PRESIGNED_URL_EXPIRY_SECONDS,
                )
                for part_number in range(1, parts + 1)
            ]
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to presign upload parts: {exc}") from exc

    def complete_multipart_upload(
        self, key: str, upload_id: str, parts: list[dict[str, Any]]
    ) -> None:
        """Assemble uploaded parts given as ``{"ETag", "PartNumber"}`` dicts."""
        ordered = sorted(parts, key=lambda part: int(part["PartNumber"]))
        try:
            self.client.complete_multipart_upload(
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={
                    "Parts": [
                        {"ETag": part["ETag"], "PartNumber": int(part["PartNumber"])}
                        for part in ordered
                    ]
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to complete multipart upload: {exc}") from exc

    def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        try:
            self.client.abort_multipart_upload(Bucket=self.bucket, Key=key, UploadId=upload_id)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Failed to abort multipart upload: {exc}") from exc


_store: ObjectStore | None = None


def get_object_store() -> ObjectStore:
    global _store
    if _store is None:
        _store = ObjectStore.from_settings()
    return _store


def set_object_store(store: ObjectStore | None) -> None:
    """Replace (or reset with None) the process-wide object store."""
    global _store
    _store = store
