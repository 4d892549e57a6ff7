"""Domain event contracts for catalog changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar

from song_catalog.domain.models import SongRecord


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Base domain event emitted by application services."""

    event_type: ClassVar[str] = "domainEvent"

    correlation_id: str
    payload_summary: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def to_message(self) -> dict[str, Any]:
        """Wire frame sent to change-feed subscribers."""

        return {"type": self.event_type, **self.payload_summary}


@dataclass(frozen=True, slots=True)
class SongAdded(DomainEvent):
    """A new song record was created."""

    event_type: ClassVar[str] = "songAdded"

    @classmethod
    def for_song(cls, song: SongRecord, *, correlation_id: str) -> SongAdded:
        return cls(
            correlation_id=correlation_id,
            payload_summary={"songId": song.id, "song": song.to_json_dict()},
        )


@dataclass(frozen=True, slots=True)
class SongDeleted(DomainEvent):
    """A song record and its file were removed."""

    event_type: ClassVar[str] = "songDeleted"

    @classmethod
    def for_song_id(cls, song_id: str, *, correlation_id: str) -> SongDeleted:
        return cls(correlation_id=correlation_id, payload_summary={"songId": song_id})
