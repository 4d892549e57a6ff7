from __future__ import annotations

import io
import wave
from pathlib import Path

import pytest

from song_catalog.utils.config import CatalogConfig


def make_wav_bytes(*, duration_seconds: float = 0.1, sample_rate: int = 8_000, channels: int = 1) -> bytes:
    frames = int(duration_seconds * sample_rate)
    with io.BytesIO() as buffer:
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(channels)
            wav.setsampwidth(2)
            wav.setframerate(sample_rate)
            wav.writeframes(b"\x00\x00" * channels * frames)
        return buffer.getvalue()


def make_mp3_bytes(size_bytes: int = 256) -> bytes:
    """ID3-tagged payload of exactly ``size_bytes`` bytes."""

    header = b"ID3\x04\x00\x00\x00\x00\x00\x00"
    return header + b"\x00" * (size_bytes - len(header))


class FakeProbe:
    def __init__(self, duration: float = 12.5) -> None:
        self.duration = duration
        self.paths: list[Path] = []

    def duration_seconds(self, path: Path) -> float:
        self.paths.append(path)
        return self.duration


class FailingProbe:
    def duration_seconds(self, path: Path) -> float:
        raise RuntimeError(f"cannot decode {path}")


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    async def publish(self, event) -> None:
        self.events.append(event)


def chunk_reader(payload: bytes, chunk_size: int | None = None):
    """Async ``read(n)`` over an in-memory payload."""

    stream = io.BytesIO(payload)

    async def read(size: int) -> bytes:
        return stream.read(chunk_size or size)

    return read


@pytest.fixture
def catalog_config(tmp_path: Path) -> CatalogConfig:
    return CatalogConfig(
        upload_dir=tmp_path / "uploads",
        snapshot_path=tmp_path / "songs.json",
        delivery_timeout_seconds=1.0,
    )
