from __future__ import annotations

import asyncio

import pytest

from conftest import make_mp3_bytes
from song_catalog.domain.errors import MissingUpload, UploadRejected
from song_catalog.interfaces.multipart_upload import MultipartUploadStream

BOUNDARY = "catalog-boundary"
CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


def _field(name: str, value: str) -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
        f"{value}\r\n"
    ).encode()


def _file(name: str, filename: str, content_type: str, payload: bytes) -> bytes:
    head = (
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode()
    return head + payload + b"\r\n"


def _closing() -> bytes:
    return f"--{BOUNDARY}--\r\n".encode()


class _Body:
    """Async chunk source that records how much of the body was pulled."""

    def __init__(self, body: bytes, chunk_size: int = 7) -> None:
        self._chunks = [body[index : index + chunk_size] for index in range(0, len(body), chunk_size)]
        self.pulled = 0
        self.total = len(self._chunks)

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        if self.pulled >= self.total:
            raise StopAsyncIteration
        self.pulled += 1
        return self._chunks[self.pulled - 1]


async def _read_all(stream: MultipartUploadStream) -> bytes:
    data = bytearray()
    while chunk := await stream.read(1024):
        data.extend(chunk)
    return bytes(data)


def test_file_part_and_fields_on_both_sides_are_read() -> None:
    payload = make_mp3_bytes(3000)
    body = _Body(
        _field("name", "Blue Monday")
        + _file("audio", "track.mp3", "audio/mpeg", payload)
        + _field("artist", "New Order")
        + _closing()
    )

    async def scenario():
        stream = MultipartUploadStream(body, CONTENT_TYPE)
        await stream.open_file()
        data = await _read_all(stream)
        return stream, data, await stream.remaining_fields()

    stream, data, fields = asyncio.run(scenario())

    assert stream.filename == "track.mp3"
    assert stream.content_type == "audio/mpeg"
    assert data == payload
    assert fields == {"name": "Blue Monday", "artist": "New Order"}


def test_reading_stops_pulling_the_body_when_the_caller_stops() -> None:
    body = _Body(_file("audio", "big.mp3", "audio/mpeg", make_mp3_bytes(64 * 1024)) + _closing(), chunk_size=1024)

    async def scenario():
        stream = MultipartUploadStream(body, CONTENT_TYPE)
        await stream.open_file()
        return await stream.read(512)

    first = asyncio.run(scenario())

    assert first.startswith(b"ID3")
    assert len(first) == 512
    assert body.pulled <= 2
    assert body.pulled < body.total


def test_other_file_parts_are_skipped() -> None:
    payload = make_mp3_bytes(200)
    body = _Body(
        _file("cover", "cover.png", "image/png", b"\x89PNG" + b"\x00" * 50)
        + _file("audio", "a.mp3", "audio/mpeg", payload)
        + _file("audio", "b.mp3", "audio/mpeg", make_mp3_bytes(100))
        + _closing()
    )

    async def scenario():
        stream = MultipartUploadStream(body, CONTENT_TYPE)
        await stream.open_file()
        data = await _read_all(stream)
        return stream.filename, data, await stream.remaining_fields()

    filename, data, fields = asyncio.run(scenario())

    assert filename == "a.mp3"
    assert data == payload
    assert fields == {}


@pytest.mark.parametrize(
    "body",
    [
        _field("name", "No File") + _closing(),
        _file("audio", "", "application/octet-stream", b"") + _closing(),
    ],
)
def test_missing_file_part_is_reported(body: bytes) -> None:
    async def scenario():
        await MultipartUploadStream(_Body(body), CONTENT_TYPE).open_file()

    with pytest.raises(MissingUpload):
        asyncio.run(scenario())


@pytest.mark.parametrize("content_type", [None, "application/json", "multipart/form-data"])
def test_non_multipart_body_is_a_missing_upload(content_type) -> None:
    with pytest.raises(MissingUpload):
        MultipartUploadStream(_Body(b""), content_type)


def test_truncated_body_is_rejected() -> None:
    body = _Body(_file("audio", "a.mp3", "audio/mpeg", make_mp3_bytes(500))[:-100])

    async def scenario():
        stream = MultipartUploadStream(body, CONTENT_TYPE)
        await stream.open_file()
        await _read_all(stream)

    with pytest.raises(UploadRejected):
        asyncio.run(scenario())


def test_oversized_form_fields_are_rejected() -> None:
    body = _Body(
        _file("audio", "a.mp3", "audio/mpeg", make_mp3_bytes(100)) + _field("name", "x" * 5000) + _closing(),
        chunk_size=512,
    )

    async def scenario():
        stream = MultipartUploadStream(body, CONTENT_TYPE, max_field_bytes=1024)
        await stream.open_file()
        await _read_all(stream)
        await stream.remaining_fields()

    with pytest.raises(UploadRejected):
        asyncio.run(scenario())
