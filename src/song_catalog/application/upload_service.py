"""Application service turning an uploaded payload into a song record."""

from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Mapping
from uuid import uuid4

from song_catalog.application.audio_storage import AudioFileStorage, DurationProbe, PartialAudioFile
from song_catalog.application.event_publisher import EventPublisher, NullEventPublisher
from song_catalog.application.metadata_store import MetadataStore
from song_catalog.domain.errors import InvalidFileType, UploadTimedOut
from song_catalog.domain.events import SongAdded
from song_catalog.domain.models import SongRecord
from song_catalog.domain.policies import DEFAULT_UPLOAD_POLICY, UploadPolicy
from song_catalog.ingest_validation import (
    SIGNATURE_LENGTH,
    check_container_signature,
    check_upload_size,
    validate_declared_type,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024

ReadChunk = Callable[[int], Awaitable[bytes]]
FormFields = Callable[[], Awaitable[Mapping[str, str]]]


@dataclass(slots=True)
class UploadSong:
    """Use case that validates, stores, probes and catalogs one upload."""

    store: MetadataStore
    file_storage: AudioFileStorage
    probe: DurationProbe
    event_publisher: EventPublisher = NullEventPublisher()
    policy: UploadPolicy = DEFAULT_UPLOAD_POLICY
    upload_timeout_seconds: float = 60.0
    probe_timeout_seconds: float = 30.0

    async def run(
        self,
        read: ReadChunk,
        *,
        filename: str | None,
        content_type: str | None,
        name: str | None = None,
        artist: str | None = None,
        correlation_id: str | None = None,
        form_fields: FormFields | None = None,
    ) -> SongRecord:
        """Store the payload produced by ``read`` and return the new record.

        Either the file and the record both exist afterwards, or neither does.
        ``form_fields`` is awaited once the payload has been read, inside the
        same timeout, and supplies ``name``/``artist`` when they were not given.
        """

        run_correlation_id = correlation_id or str(uuid4())
        extension = validate_declared_type(filename, content_type, self.policy)
        stored_filename = self.file_storage.allocate_name(extension)

        partial = await self.file_storage.begin(stored_filename)
        committed = False
        try:
            try:
                size_bytes, fields = await asyncio.wait_for(
                    self._receive_upload(read, partial, form_fields),
                    timeout=self.upload_timeout_seconds,
                )
            except asyncio.TimeoutError as error:
                raise UploadTimedOut(
                    f"Upload was not received within {self.upload_timeout_seconds:g} seconds."
                ) from error
            path = await partial.commit()
            committed = True
        finally:
            if not committed:
                partial.discard()

        record: SongRecord | None = None
        try:
            duration_seconds = await self._probe_duration(path)
            record = SongRecord.create(
                stored_filename=stored_filename,
                original_filename=filename or stored_filename,
                name=name if name is not None else fields.get("name"),
                artist=artist if artist is not None else fields.get("artist"),
                duration_seconds=duration_seconds,
            )
            await self.store.append(record)
        except BaseException:
            # Cancellation included; a record already in the index keeps its file.
            if record is None or self.store.get(record.id) is None:
                await asyncio.to_thread(self.file_storage.delete, stored_filename)
            raise

        logger.info(
            "Song uploaded",
            extra={
                "song_id": record.id,
                "stored_filename": stored_filename,
                "size_bytes": size_bytes,
                "correlation_id": run_correlation_id,
            },
        )
        await self.event_publisher.publish(SongAdded.for_song(record, correlation_id=run_correlation_id))
        return record

    async def _receive_upload(
        self,
        read: ReadChunk,
        partial: PartialAudioFile,
        form_fields: FormFields | None,
    ) -> tuple[int, Mapping[str, str]]:
        size_bytes = await self._receive(read, partial)
        fields = await form_fields() if form_fields is not None else {}
        return size_bytes, fields

    async def _receive(self, read: ReadChunk, partial: PartialAudioFile) -> int:
        size_bytes = 0
        head = bytearray()
        signature_checked = not self.policy.sniff_containers

        while True:
            chunk = await read(CHUNK_SIZE)
            if not chunk:
                break
            size_bytes += len(chunk)
            if not signature_checked:
                head.extend(chunk)
                if len(head) < SIGNATURE_LENGTH:
                    continue
                check_container_signature(bytes(head))
                signature_checked = True
                chunk = bytes(head)
                head.clear()
            check_upload_size(size_bytes, self.policy)
            await partial.write(chunk)

        if size_bytes == 0:
            raise InvalidFileType("Audio file is empty.")
        if head:
            check_container_signature(bytes(head))
            check_upload_size(size_bytes, self.policy)
            await partial.write(bytes(head))
        return size_bytes

    async def _probe_duration(self, path: Path) -> float:
        try:
            duration = await asyncio.wait_for(
                asyncio.to_thread(self.probe.duration_seconds, path),
                timeout=self.probe_timeout_seconds,
            )
        except Exception as error:  # noqa: BLE001
            logger.warning(
                "Could not probe audio duration; recording it as unknown.",
                extra={"path": str(path)},
                exc_info=error,
            )
            return 0.0
        if not math.isfinite(duration) or duration < 0:
            return 0.0
        return float(duration)
