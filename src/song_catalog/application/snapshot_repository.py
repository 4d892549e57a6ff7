"""Application port for the durable catalog snapshot."""

from __future__ import annotations

from typing import Protocol, Sequence

from song_catalog.domain.models import SongRecord


class SongSnapshotRepository(Protocol):
    """Port implemented by infrastructure adapters that persist the full catalog.

    ``load`` returns an empty list when no snapshot exists yet and raises
    ``SnapshotLoadFailed`` when one exists but cannot be read. ``save`` replaces
    the whole snapshot and raises ``StorageWriteFailed`` on I/O errors.
    """

    def load(self) -> list[SongRecord]:
        """Read every stored record in insertion order."""

    def save(self, records: Sequence[SongRecord]) -> None:
        """Replace the snapshot with ``records``."""
