"""Public package exports for the song catalog with lazy imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "SongRecord",
    "MetadataStore",
    "UploadSong",
    "DeleteSong",
    "ChangeNotifier",
    "CatalogConfig",
    "create_app",
    "InvalidFileType",
    "FileTooLarge",
    "StorageWriteFailed",
    "NotFound",
]

_EXPORT_MODULES: dict[str, str] = {
    "SongRecord": "song_catalog.domain.models",
    "MetadataStore": "song_catalog.application.metadata_store",
    "UploadSong": "song_catalog.application.upload_service",
    "DeleteSong": "song_catalog.application.deletion_service",
    "ChangeNotifier": "song_catalog.infrastructure.change_notifier",
    "CatalogConfig": "song_catalog.utils.config",
    "create_app": "song_catalog.api",
    "InvalidFileType": "song_catalog.domain.errors",
    "FileTooLarge": "song_catalog.domain.errors",
    "StorageWriteFailed": "song_catalog.domain.errors",
    "NotFound": "song_catalog.domain.errors",
}


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MODULES:
        raise AttributeError(f"module 'song_catalog' has no attribute {name!r}")

    module = import_module(_EXPORT_MODULES[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
