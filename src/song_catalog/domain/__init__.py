"""DDD domain layer."""

from .errors import (
    CatalogError,
    DeliveryFailed,
    FileTooLarge,
    InvalidFileType,
    MissingUpload,
    NotFound,
    SnapshotLoadFailed,
    StorageWriteFailed,
    UploadRejected,
    UploadTimedOut,
)
from .events import DomainEvent, SongAdded, SongDeleted
from .models import DEFAULT_ARTIST, SongRecord, default_title
from .policies import DEFAULT_UPLOAD_POLICY, MAX_UPLOAD_BYTES, UploadPolicy, media_type_for

__all__ = [
    "CatalogError",
    "UploadRejected",
    "InvalidFileType",
    "FileTooLarge",
    "UploadTimedOut",
    "MissingUpload",
    "StorageWriteFailed",
    "NotFound",
    "SnapshotLoadFailed",
    "DeliveryFailed",
    "DomainEvent",
    "SongAdded",
    "SongDeleted",
    "DEFAULT_ARTIST",
    "SongRecord",
    "default_title",
    "DEFAULT_UPLOAD_POLICY",
    "MAX_UPLOAD_BYTES",
    "UploadPolicy",
    "media_type_for",
]
