"""Upload ingest validation.

Checks run in a fixed order and the first failure wins: the declared type
(extension and MIME) is checked before any bytes are read, the container
signature is sniffed from the leading bytes, and the size ceiling is enforced
while the payload streams in.
"""

from __future__ import annotations

from pathlib import PurePath

from song_catalog.domain.errors import FileTooLarge, InvalidFileType
from song_catalog.domain.policies import DEFAULT_UPLOAD_POLICY, GENERIC_MIME_TYPES, UploadPolicy

SIGNATURE_LENGTH = 12


def validate_declared_type(
    filename: str | None,
    content_type: str | None,
    policy: UploadPolicy | None = None,
) -> str:
    """Check the uploader-supplied filename and MIME type; return the extension."""

    policy = policy or DEFAULT_UPLOAD_POLICY
    extension = upload_extension(filename)
    if extension not in policy.allowed_extensions:
        supported = ", ".join(policy.allowed_extensions)
        raise InvalidFileType(
            f"Unsupported file type for '{filename or ''}'. Supported extensions: {supported}."
        )

    mime_type = normalize_mime_type(content_type)
    if mime_type not in GENERIC_MIME_TYPES and mime_type not in policy.allowed_mime_types:
        raise InvalidFileType(f"Only audio files are allowed (got content type '{mime_type}').")
    return extension


def check_container_signature(head: bytes) -> str:
    """Identify the audio container from leading bytes or raise InvalidFileType."""

    container = sniff_container(head)
    if container is None:
        raise InvalidFileType("Unsupported or unrecognized audio container.")
    return container


def check_upload_size(size_bytes: int, policy: UploadPolicy | None = None) -> None:
    policy = policy or DEFAULT_UPLOAD_POLICY
    if size_bytes > policy.max_file_size_bytes:
        raise FileTooLarge(
            f"Audio file exceeds max size limit of {policy.max_file_size_bytes} bytes."
        )


def sniff_container(head: bytes) -> str | None:
    if head.startswith(b"ID3"):
        return "mp3"
    if head.startswith(b"RIFF") and head[8:12] == b"WAVE":
        return "wav"
    if head.startswith(b"OggS"):
        return "ogg"
    if head.startswith(b"fLaC"):
        return "flac"
    if head[4:8] == b"ftyp":
        return "m4a"
    if head.startswith(b"ADIF"):
        return "aac"
    if len(head) >= 2 and head[0] == 0xFF:
        # ADTS: 12-bit sync word followed by layer bits 00.
        if (head[1] & 0xF6) == 0xF0:
            return "aac"
        # MPEG audio frame sync with a non-reserved layer.
        if (head[1] & 0xE0) == 0xE0 and (head[1] & 0x06) != 0:
            return "mp3"
    return None


def upload_extension(filename: str | None) -> str:
    if not filename:
        return ""
    return PurePath(filename.replace("\\", "/")).suffix.lower()


def normalize_mime_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()
