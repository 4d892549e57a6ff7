"""Application ports for audio payload storage and duration probing."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class PartialAudioFile(Protocol):
    """An in-flight upload that becomes visible only once committed."""

    stored_filename: str

    async def write(self, chunk: bytes) -> None:
        """Append ``chunk`` to the partial file."""

    async def commit(self) -> Path:
        """Publish the file under its stored name and return its path."""

    def discard(self) -> None:
        """Remove the partial file; safe to call more than once."""


class AudioFileStorage(Protocol):
    """Port for the directory holding uploaded audio payloads."""

    def allocate_name(self, extension: str) -> str:
        """Reserve a stored filename that no other file uses."""

    async def begin(self, stored_filename: str) -> PartialAudioFile:
        """Open a partial file for a previously allocated name."""

    def exists(self, stored_filename: str) -> bool:
        """Whether a committed file with this name is present."""

    def resolve(self, stored_filename: str) -> Path | None:
        """Path of a committed file, or ``None`` if absent or not a plain name."""

    def delete(self, stored_filename: str) -> bool:
        """Unlink the file; ``False`` when it was already absent."""


class DurationProbe(Protocol):
    """Port for the external decoder that measures playback length."""

    def duration_seconds(self, path: Path) -> float:
        """Return the playback length; raise on any decode failure."""
