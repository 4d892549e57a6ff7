"""Incremental multipart/form-data reading for audio uploads."""

from __future__ import annotations

from typing import AsyncIterator

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header
from starlette.requests import ClientDisconnect

from song_catalog.domain.errors import MissingUpload, UploadRejected

MAX_FORM_FIELD_BYTES = 1024 * 1024

_FILE = "file"
_FIELD = "field"
_SKIP = "skip"


class MultipartUploadStream:
    """One file part pulled out of a multipart body as the client sends it.

    Body chunks are fed to the parser only when ``read`` runs out of file data,
    so nothing is spooled and a rejected upload stops consuming the request.
    Text fields are collected wherever they appear; other file parts are skipped.
    """

    def __init__(
        self,
        chunks: AsyncIterator[bytes],
        content_type: str | None,
        *,
        file_field: str = "audio",
        max_field_bytes: int = MAX_FORM_FIELD_BYTES,
    ) -> None:
        media_type, options = parse_options_header(content_type or "")
        boundary = options.get(b"boundary")
        if media_type != b"multipart/form-data" or not boundary:
            raise MissingUpload("No audio file provided")

        self.file_field = file_field
        self.filename: str | None = None
        self.content_type: str | None = None
        self.fields: dict[str, str] = {}

        self._chunks = chunks
        self._max_field_bytes = max_field_bytes
        self._field_bytes = 0
        self._file_data = bytearray()
        self._file_started = False
        self._file_done = False
        self._body_done = False

        self._part_kind = _SKIP
        self._part_name = ""
        self._part_value = bytearray()
        self._headers: list[tuple[bytes, bytes]] = []
        self._header_field = bytearray()
        self._header_value = bytearray()

        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_end": self._on_end,
            },
        )

    async def open_file(self) -> None:
        """Advance to the file part; raises ``MissingUpload`` when there is none."""

        while not self._file_started:
            if not await self._feed():
                raise MissingUpload("No audio file provided")
        if not self.filename:
            # Browsers send an empty filename when no file was chosen.
            raise MissingUpload("No audio file provided")

    async def read(self, size: int = -1) -> bytes:
        """Up to ``size`` bytes of the file part; ``b""`` once it has ended."""

        while not self._file_data and not self._file_done:
            if not await self._feed():
                raise UploadRejected("Upload ended before the audio file was complete.")

        if size < 0 or size >= len(self._file_data):
            data = bytes(self._file_data)
            self._file_data.clear()
        else:
            data = bytes(self._file_data[:size])
            del self._file_data[:size]
        return data

    async def remaining_fields(self) -> dict[str, str]:
        """Read the rest of the body and return every text field seen."""

        while await self._feed():
            pass
        return dict(self.fields)

    async def _feed(self) -> bool:
        if self._body_done:
            return False
        try:
            chunk = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._body_done = True
            return False
        except ClientDisconnect as error:
            raise UploadRejected("Client disconnected during upload.") from error

        if chunk:
            try:
                self._parser.write(chunk)
            except MultipartParseError as error:
                raise UploadRejected(f"Malformed multipart body: {error}") from error
        return True

    def _on_part_begin(self) -> None:
        self._headers = []
        self._part_kind = _SKIP
        self._part_name = ""
        self._part_value = bytearray()

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field.extend(data[start:end])

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value.extend(data[start:end])

    def _on_header_end(self) -> None:
        self._headers.append((bytes(self._header_field).lower(), bytes(self._header_value)))
        self._header_field.clear()
        self._header_value.clear()

    def _on_headers_finished(self) -> None:
        headers = dict(self._headers)
        _, options = parse_options_header(headers.get(b"content-disposition", b""))
        self._part_name = options.get(b"name", b"").decode("utf-8", errors="replace")
        filename = options.get(b"filename")

        if filename is None:
            self._part_kind = _FIELD
        elif self._part_name == self.file_field and not self._file_started:
            self._part_kind = _FILE
            self._file_started = True
            self.filename = filename.decode("utf-8", errors="replace")
            content_type = headers.get(b"content-type")
            self.content_type = content_type.decode("latin-1") if content_type else None

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._part_kind == _FILE:
            self._file_data.extend(data[start:end])
            return
        self._field_bytes += end - start
        if self._field_bytes > self._max_field_bytes:
            raise UploadRejected("Form fields exceed the allowed size.")
        if self._part_kind == _FIELD:
            self._part_value.extend(data[start:end])

    def _on_part_end(self) -> None:
        if self._part_kind == _FILE:
            self._file_done = True
        elif self._part_kind == _FIELD:
            self.fields[self._part_name] = self._part_value.decode("utf-8", errors="replace")
        self._part_kind = _SKIP

    def _on_end(self) -> None:
        self._body_done = True


__all__ = ["MAX_FORM_FIELD_BYTES", "MultipartUploadStream"]
