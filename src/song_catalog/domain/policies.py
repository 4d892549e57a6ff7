"""Domain value objects describing upload acceptance rules."""

from __future__ import annotations

from dataclasses import dataclass

MAX_UPLOAD_BYTES = 50 * 1024 * 1024

EXTENSION_MEDIA_TYPES: dict[str, str] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".flac": "audio/flac",
}

SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(EXTENSION_MEDIA_TYPES)
SUPPORTED_MIME_TYPES: tuple[str, ...] = (
    "audio/mpeg",
    "audio/mp3",
    "audio/wav",
    "audio/x-wav",
    "audio/wave",
    "audio/vnd.wave",
    "audio/ogg",
    "audio/m4a",
    "audio/x-m4a",
    "audio/mp4",
    "audio/aac",
    "audio/x-aac",
    "audio/flac",
    "audio/x-flac",
)
# Declared types that say nothing about the payload; the extension decides.
GENERIC_MIME_TYPES: tuple[str, ...] = ("", "application/octet-stream", "binary/octet-stream")


@dataclass(frozen=True, slots=True)
class UploadPolicy:
    """Policy describing which payloads the upload pipeline accepts."""

    policy_id: str
    max_file_size_bytes: int = MAX_UPLOAD_BYTES
    allowed_extensions: tuple[str, ...] = SUPPORTED_EXTENSIONS
    allowed_mime_types: tuple[str, ...] = SUPPORTED_MIME_TYPES
    sniff_containers: bool = True
    policy_version: str = "v1"


DEFAULT_UPLOAD_POLICY = UploadPolicy(policy_id="audio-upload-default", policy_version="v1")


def media_type_for(filename: str) -> str:
    """Media type served for a stored audio file."""

    for extension, media_type in EXTENSION_MEDIA_TYPES.items():
        if filename.lower().endswith(extension):
            return media_type
    return "application/octet-stream"
