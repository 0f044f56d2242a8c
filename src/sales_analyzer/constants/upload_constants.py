"""Limits and allow-lists for call recording uploads."""

from __future__ import annotations

ALLOWED_AUDIO_MIME_TYPES = frozenset(
    {
        "audio/mpeg",
        "audio/wav",
        "audio/x-wav",
        "audio/mp4",
        "audio/aac",
        "audio/ogg",
        "audio/flac",
        "audio/webm",
    }
)

ALLOWED_AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".m4a", ".aac", ".ogg", ".flac", ".webm"})

# Extension -> MIME type used when a stored upload has no recorded type.
EXTENSION_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".flac": "audio/flac",
    ".webm": "audio/webm",
}

MAX_FILE_SIZE = 200 * 1024 * 1024
MAX_FILES_PER_REQUEST = 10

MULTIPART_UPLOAD_EXPIRY_HOURS = 24
PRESIGNED_URL_EXPIRY_SECONDS = 3600

GZIP_MAGIC = b"\x1f\x8b"
