"""Local-directory storage for uploaded audio payloads."""

from __future__ import annotations

import asyncio
import os
import secrets
import time
from contextlib import suppress
from pathlib import Path, PurePath
from typing import BinaryIO, Callable

from song_catalog.domain.errors import StorageWriteFailed

_PARTIAL_SUFFIX = ".part"


class LocalPartialAudioFile:
    """Upload being written to a hidden ``.<name>.part`` file."""

    def __init__(self, storage: LocalAudioFileStorage, stored_filename: str, handle: BinaryIO) -> None:
        self.stored_filename = stored_filename
        self._storage = storage
        self._handle = handle
        self._partial_path = storage.partial_path(stored_filename)
        self._done = False

    async def write(self, chunk: bytes) -> None:
        await asyncio.to_thread(self._write, chunk)

    async def commit(self) -> Path:
        return await asyncio.to_thread(self._commit)

    def discard(self) -> None:
        if self._done:
            return
        self._done = True
        with suppress(OSError):
            self._handle.close()
        with suppress(OSError):
            self._partial_path.unlink(missing_ok=True)
        self._storage.release(self.stored_filename)

    def _write(self, chunk: bytes) -> None:
        try:
            self._handle.write(chunk)
        except OSError as error:
            raise StorageWriteFailed(f"Could not write audio file: {error}") from error

    def _commit(self) -> Path:
        final_path = self._storage.root / self.stored_filename
        try:
            self._handle.flush()
            os.fsync(self._handle.fileno())
            self._handle.close()
            os.replace(self._partial_path, final_path)
        except OSError as error:
            raise StorageWriteFailed(f"Could not store audio file: {error}") from error
        self._done = True
        self._storage.release(self.stored_filename)
        return final_path


class LocalAudioFileStorage:
    """Audio files live directly under ``root``, named by their stored filename."""

    def __init__(self, root: Path, *, clock: Callable[[], float] = time.time) -> None:
        self.root = Path(root)
        self._clock = clock
        self._reserved: set[str] = set()

    def ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def allocate_name(self, extension: str) -> str:
        while True:
            candidate = f"{int(self._clock() * 1000)}-{secrets.randbelow(10**9):09d}{extension}"
            if candidate not in self._reserved and not (self.root / candidate).exists():
                self._reserved.add(candidate)
                return candidate

    def release(self, stored_filename: str) -> None:
        self._reserved.discard(stored_filename)

    def partial_path(self, stored_filename: str) -> Path:
        return self.root / f".{stored_filename}{_PARTIAL_SUFFIX}"

    async def begin(self, stored_filename: str) -> LocalPartialAudioFile:
        try:
            handle = await asyncio.to_thread(self._open_partial, stored_filename)
        except OSError as error:
            self.release(stored_filename)
            raise StorageWriteFailed(f"Could not create audio file: {error}") from error
        return LocalPartialAudioFile(self, stored_filename, handle)

    def exists(self, stored_filename: str) -> bool:
        return self.resolve(stored_filename) is not None

    def resolve(self, stored_filename: str) -> Path | None:
        if not _is_plain_name(stored_filename):
            return None
        path = self.root / stored_filename
        return path if path.is_file() else None

    def delete(self, stored_filename: str) -> bool:
        if not _is_plain_name(stored_filename):
            return False
        try:
            (self.root / stored_filename).unlink()
        except FileNotFoundError:
            return False
        except OSError as error:
            raise StorageWriteFailed(f"Could not delete audio file {stored_filename}: {error}") from error
        return True

    def _open_partial(self, stored_filename: str) -> BinaryIO:
        self.ensure_root()
        return self.partial_path(stored_filename).open("xb")


def _is_plain_name(name: str) -> bool:
    """Hidden files (partials, snapshot temp files) and paths are never served."""

    return bool(name) and PurePath(name).name == name and "\\" not in name and not name.startswith(".")
