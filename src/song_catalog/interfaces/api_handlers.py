"""API-facing wiring of application services."""

from __future__ import annotations

from dataclasses import dataclass

from song_catalog.application.audio_storage import DurationProbe
from song_catalog.application.deletion_service import DeleteSong
from song_catalog.application.event_publisher import CompositeEventPublisher
from song_catalog.application.metadata_store import MetadataStore
from song_catalog.application.upload_service import UploadSong
from song_catalog.infrastructure.change_notifier import ChangeNotifier
from song_catalog.infrastructure.json_snapshot_repository import JsonSnapshotRepository
from song_catalog.infrastructure.local_file_storage import LocalAudioFileStorage
from song_catalog.infrastructure.logging_event_publisher import LoggingEventPublisher
from song_catalog.infrastructure.pedalboard_probe import PedalboardDurationProbe
from song_catalog.utils.config import CatalogConfig


@dataclass(frozen=True, slots=True)
class CatalogServices:
    """Everything one API instance needs; owned by the FastAPI app state."""

    config: CatalogConfig
    store: MetadataStore
    file_storage: LocalAudioFileStorage
    notifier: ChangeNotifier
    upload_song: UploadSong
    delete_song: DeleteSong


def build_services(config: CatalogConfig, *, probe: DurationProbe | None = None) -> CatalogServices:
    file_storage = LocalAudioFileStorage(config.upload_dir)
    file_storage.ensure_root()
    store = MetadataStore(JsonSnapshotRepository(config.snapshot_path), file_exists=file_storage.exists)
    notifier = ChangeNotifier(delivery_timeout_seconds=config.delivery_timeout_seconds)
    event_publisher = CompositeEventPublisher(LoggingEventPublisher(), notifier)

    return CatalogServices(
        config=config,
        store=store,
        file_storage=file_storage,
        notifier=notifier,
        upload_song=UploadSong(
            store=store,
            file_storage=file_storage,
            probe=probe or PedalboardDurationProbe(),
            event_publisher=event_publisher,
            policy=config.upload_policy(),
            upload_timeout_seconds=config.upload_timeout_seconds,
            probe_timeout_seconds=config.probe_timeout_seconds,
        ),
        delete_song=DeleteSong(store=store, file_storage=file_storage, event_publisher=event_publisher),
    )


__all__ = ["CatalogServices", "build_services"]
