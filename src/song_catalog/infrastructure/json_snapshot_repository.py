"""JSON file adapter for the catalog snapshot."""

from __future__ import annotations

import json
import os
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Sequence

from pydantic import TypeAdapter

from song_catalog.application.snapshot_repository import SongSnapshotRepository
from song_catalog.domain.errors import SnapshotLoadFailed, StorageWriteFailed
from song_catalog.domain.models import SongRecord

_SNAPSHOT_ADAPTER = TypeAdapter(list[SongRecord])


@dataclass(frozen=True, slots=True)
class JsonSnapshotRepository(SongSnapshotRepository):
    """Persist the whole catalog as one pretty-printed JSON array."""

    path: Path

    def load(self) -> list[SongRecord]:
        if not self.path.exists():
            return []
        try:
            raw = self.path.read_text(encoding="utf-8")
            return _SNAPSHOT_ADAPTER.validate_json(raw)
        except (OSError, ValueError) as error:
            raise SnapshotLoadFailed(f"Could not read song snapshot {self.path}: {error}") from error

    def save(self, records: Sequence[SongRecord]) -> None:
        payload = json.dumps([record.to_json_dict() for record in records], indent=2)
        temp_path: Path | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(temp_path, self.path)
        except OSError as error:
            if temp_path is not None:
                with suppress(OSError):
                    temp_path.unlink(missing_ok=True)
            raise StorageWriteFailed(f"Could not write song snapshot {self.path}: {error}") from error
