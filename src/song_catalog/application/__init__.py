"""DDD application layer."""

from .deletion_service import DeleteSong
from .event_publisher import CompositeEventPublisher, EventPublisher, NullEventPublisher
from .metadata_store import MetadataStore
from .upload_service import UploadSong

__all__ = [
    "CompositeEventPublisher",
    "EventPublisher",
    "NullEventPublisher",
    "MetadataStore",
    "UploadSong",
    "DeleteSong",
]
