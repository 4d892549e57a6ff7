"""Domain models for the song catalog."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Any
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DEFAULT_ARTIST = "Unknown Artist"


class SongRecord(BaseModel):
    """Metadata for one uploaded audio file.

    Serialized with camelCase keys. Snapshots written by earlier releases used
    ``filename``/``originalName``/``duration``; those keys are still accepted
    when loading.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    name: str
    artist: str = DEFAULT_ARTIST
    stored_filename: str = Field(
        min_length=1,
        validation_alias=AliasChoices("storedFilename", "filename"),
        serialization_alias="storedFilename",
    )
    original_filename: str = Field(
        validation_alias=AliasChoices("originalFilename", "originalName"),
        serialization_alias="originalFilename",
    )
    duration_seconds: float = Field(
        0.0,
        validation_alias=AliasChoices("durationSeconds", "duration"),
        serialization_alias="durationSeconds",
    )
    uploaded_at: datetime = Field(
        validation_alias=AliasChoices("uploadedAt"),
        serialization_alias="uploadedAt",
    )

    @field_validator("duration_seconds", mode="before")
    @classmethod
    def _unknown_duration_is_zero(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        if isinstance(value, (int, float)) and (not math.isfinite(value) or value < 0):
            return 0.0
        return value

    @classmethod
    def create(
        cls,
        *,
        stored_filename: str,
        original_filename: str,
        name: str | None = None,
        artist: str | None = None,
        duration_seconds: float = 0.0,
    ) -> SongRecord:
        """Build a new record, applying title/artist defaults."""

        return cls(
            id=uuid4().hex,
            name=_clean(name) or default_title(original_filename),
            artist=_clean(artist) or DEFAULT_ARTIST,
            stored_filename=stored_filename,
            original_filename=original_filename,
            duration_seconds=duration_seconds,
            uploaded_at=datetime.now(tz=timezone.utc),
        )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def default_title(original_filename: str) -> str:
    """Base name of the uploaded file without its extension."""

    base_name = PurePath(original_filename.replace("\\", "/")).name
    return PurePath(base_name).stem or base_name or "Untitled"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
