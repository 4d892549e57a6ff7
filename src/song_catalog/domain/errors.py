"""Error taxonomy for catalog operations."""

from __future__ import annotations


class CatalogError(Exception):
    """Base error carrying a stable machine-readable code."""

    code = "catalog_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class UploadRejected(CatalogError):
    """An upload failed validation before any record was created."""

    code = "upload_rejected"


class InvalidFileType(UploadRejected):
    code = "invalid_file_type"


class FileTooLarge(UploadRejected):
    code = "file_too_large"


class UploadTimedOut(UploadRejected):
    code = "upload_timed_out"


class MissingUpload(UploadRejected):
    code = "missing_file"


class StorageWriteFailed(CatalogError):
    """Disk write failed (disk full, permission denied, ...)."""

    code = "storage_write_failed"


class NotFound(CatalogError):
    code = "not_found"


class SnapshotLoadFailed(CatalogError):
    """The durable snapshot was unreadable; callers degrade to an empty catalog."""

    code = "snapshot_load_failed"


class DeliveryFailed(CatalogError):
    """A change event could not be delivered to one subscriber."""

    code = "delivery_failed"
