"""Application service removing a song record and its backing file."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from uuid import uuid4

from song_catalog.application.audio_storage import AudioFileStorage
from song_catalog.application.event_publisher import EventPublisher, NullEventPublisher
from song_catalog.application.metadata_store import MetadataStore
from song_catalog.domain.errors import NotFound
from song_catalog.domain.events import SongDeleted
from song_catalog.domain.models import SongRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DeleteSong:
    """Use case that deletes one song by id."""

    store: MetadataStore
    file_storage: AudioFileStorage
    event_publisher: EventPublisher = NullEventPublisher()

    async def run(self, song_id: str, *, correlation_id: str | None = None) -> SongRecord:
        run_correlation_id = correlation_id or str(uuid4())
        record = self.store.get(song_id)
        if record is None:
            raise NotFound(f"Song not found: {song_id}")

        # StorageWriteFailed propagates and leaves the record in place.
        removed_file = await asyncio.to_thread(self.file_storage.delete, record.stored_filename)
        if not removed_file:
            logger.warning(
                "Backing file already absent while deleting song",
                extra={"song_id": song_id, "stored_filename": record.stored_filename},
            )

        removed = await self.store.remove(song_id)
        if removed is None:
            # A concurrent delete won the race.
            raise NotFound(f"Song not found: {song_id}")

        logger.info("Song deleted", extra={"song_id": song_id, "correlation_id": run_correlation_id})
        await self.event_publisher.publish(SongDeleted.for_song_id(song_id, correlation_id=run_correlation_id))
        return removed
