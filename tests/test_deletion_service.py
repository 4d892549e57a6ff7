from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pytest

from conftest import FakeProbe, RecordingPublisher, chunk_reader, make_mp3_bytes
from song_catalog.application.deletion_service import DeleteSong
from song_catalog.application.metadata_store import MetadataStore
from song_catalog.application.upload_service import UploadSong
from song_catalog.domain.errors import NotFound, StorageWriteFailed
from song_catalog.domain.events import SongDeleted
from song_catalog.infrastructure.json_snapshot_repository import JsonSnapshotRepository
from song_catalog.infrastructure.local_file_storage import LocalAudioFileStorage


def _services(tmp_path: Path):
    storage = LocalAudioFileStorage(tmp_path / "uploads")
    storage.ensure_root()
    store = MetadataStore(JsonSnapshotRepository(tmp_path / "songs.json"))
    publisher = RecordingPublisher()
    upload = UploadSong(store=store, file_storage=storage, probe=FakeProbe())
    delete = DeleteSong(store=store, file_storage=storage, event_publisher=publisher)
    return store, storage, upload, delete, publisher


def _upload(upload: UploadSong):
    return asyncio.run(upload.run(chunk_reader(make_mp3_bytes()), filename="track.mp3", content_type="audio/mpeg"))


def test_delete_removes_record_and_file_then_repeat_is_not_found(tmp_path: Path) -> None:
    store, storage, upload, delete, publisher = _services(tmp_path)
    record = _upload(upload)

    removed = asyncio.run(delete.run(record.id, correlation_id="corr-del"))

    assert removed.id == record.id
    assert store.list() == ()
    assert not (tmp_path / "uploads" / record.stored_filename).exists()
    assert [type(event) for event in publisher.events] == [SongDeleted]
    assert publisher.events[0].to_message() == {"type": "songDeleted", "songId": record.id}

    with pytest.raises(NotFound):
        asyncio.run(delete.run(record.id))
    assert len(publisher.events) == 1


def test_delete_with_missing_file_still_succeeds(tmp_path: Path, caplog) -> None:
    store, storage, upload, delete, publisher = _services(tmp_path)
    record = _upload(upload)
    (tmp_path / "uploads" / record.stored_filename).unlink()

    with caplog.at_level(logging.WARNING):
        asyncio.run(delete.run(record.id))

    assert store.list() == ()
    assert "already absent" in caplog.text


def test_delete_unknown_id_is_not_found(tmp_path: Path) -> None:
    _, _, _, delete, publisher = _services(tmp_path)

    with pytest.raises(NotFound) as exc:
        asyncio.run(delete.run("does-not-exist"))

    assert exc.value.code == "not_found"
    assert publisher.events == []


def test_unlink_failure_keeps_record(tmp_path: Path, monkeypatch) -> None:
    store, storage, upload, delete, publisher = _services(tmp_path)
    record = _upload(upload)

    def failing_delete(stored_filename: str) -> bool:
        raise StorageWriteFailed("Permission denied")

    monkeypatch.setattr(storage, "delete", failing_delete)

    with pytest.raises(StorageWriteFailed):
        asyncio.run(delete.run(record.id))

    assert store.list() == (record,)
    assert publisher.events == []


def test_concurrent_deletes_of_same_id_yield_one_success(tmp_path: Path) -> None:
    store, storage, upload, delete, publisher = _services(tmp_path)
    record = _upload(upload)

    async def scenario():
        return await asyncio.gather(delete.run(record.id), delete.run(record.id), return_exceptions=True)

    results = asyncio.run(scenario())

    assert sum(isinstance(result, NotFound) for result in results) == 1
    assert store.list() == ()
    assert len(publisher.events) == 1
