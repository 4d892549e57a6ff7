"""In-memory song index backed by a durable snapshot."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from song_catalog.application.snapshot_repository import SongSnapshotRepository
from song_catalog.domain.errors import SnapshotLoadFailed, StorageWriteFailed
from song_catalog.domain.models import SongRecord

logger = logging.getLogger(__name__)


class MetadataStore:
    """Single source of truth for the set of song records.

    The in-memory list is the operational truth. Every mutation rewrites the
    whole snapshot while holding ``_lock``, so the index change and the
    snapshot write for one operation finish before the next mutation starts.
    A failed snapshot write is logged and the in-memory change is kept.
    """

    def __init__(
        self,
        repository: SongSnapshotRepository,
        *,
        file_exists: Callable[[str], bool] | None = None,
    ) -> None:
        self._repository = repository
        self._file_exists = file_exists
        self._records: list[SongRecord] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._records)

    async def load(self) -> None:
        """Replace the index with the durable snapshot; never raises."""

        async with self._lock:
            try:
                records = await asyncio.to_thread(self._repository.load)
            except SnapshotLoadFailed as error:
                logger.error(
                    "Song snapshot could not be loaded; starting with an empty catalog.",
                    extra={"code": error.code},
                    exc_info=error,
                )
                records = []
            self._records = list(records)

        logger.info("Song catalog loaded", extra={"song_count": len(self._records)})
        self._report_missing_files()

    def list(self) -> tuple[SongRecord, ...]:
        return tuple(self._records)

    def get(self, song_id: str) -> SongRecord | None:
        for record in self._records:
            if record.id == song_id:
                return record
        return None

    async def append(self, record: SongRecord) -> None:
        async with self._lock:
            for existing in self._records:
                if existing.id == record.id:
                    raise ValueError(f"Duplicate song id: {record.id}")
                if existing.stored_filename == record.stored_filename:
                    raise ValueError(f"Duplicate stored filename: {record.stored_filename}")
            self._records.append(record)
            await self._write_snapshot()

    async def remove(self, song_id: str) -> SongRecord | None:
        """Remove the record with ``song_id``; ``None`` when no record matched."""

        async with self._lock:
            for index, record in enumerate(self._records):
                if record.id == song_id:
                    del self._records[index]
                    await self._write_snapshot()
                    return record
        return None

    async def _write_snapshot(self) -> None:
        snapshot = tuple(self._records)
        try:
            await asyncio.to_thread(self._repository.save, snapshot)
        except StorageWriteFailed as error:
            logger.error(
                "Song snapshot write failed; in-memory catalog kept.",
                extra={"code": error.code, "song_count": len(snapshot)},
                exc_info=error,
            )

    def _report_missing_files(self) -> None:
        if self._file_exists is None:
            return
        for record in self._records:
            if not self._file_exists(record.stored_filename):
                logger.warning(
                    "Catalog record has no backing file",
                    extra={"song_id": record.id, "stored_filename": record.stored_filename},
                )
