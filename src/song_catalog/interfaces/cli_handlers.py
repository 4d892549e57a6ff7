"""CLI-facing HTTP client calls against a running catalog server."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import requests

from song_catalog.domain.policies import media_type_for

DEFAULT_SERVER_URL = "http://localhost:3000"
FETCH_TIMEOUT_SECONDS = 30
UPLOAD_TIMEOUT_SECONDS = 60


class CatalogClientError(RuntimeError):
    """The catalog server answered with a non-success status."""

    def __init__(self, status_code: int, detail: Any) -> None:
        super().__init__(f"Catalog server returned {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def fetch_songs(server_url: str = DEFAULT_SERVER_URL) -> list[dict[str, Any]]:
    response = requests.get(_url(server_url, "/api/songs"), timeout=FETCH_TIMEOUT_SECONDS)
    return _json_or_raise(response)


def upload_song_file(
    path: Path,
    *,
    name: str | None = None,
    artist: str | None = None,
    server_url: str = DEFAULT_SERVER_URL,
) -> dict[str, Any]:
    data = {key: value for key, value in {"name": name, "artist": artist}.items() if value}
    with path.open("rb") as handle:
        response = requests.post(
            _url(server_url, "/api/upload"),
            files={"audio": (path.name, handle, media_type_for(path.name))},
            data=data,
            timeout=UPLOAD_TIMEOUT_SECONDS,
        )
    return _json_or_raise(response)


def delete_song(song_id: str, *, server_url: str = DEFAULT_SERVER_URL) -> dict[str, Any]:
    response = requests.delete(_url(server_url, f"/api/songs/{song_id}"), timeout=FETCH_TIMEOUT_SECONDS)
    return _json_or_raise(response)


def format_duration(seconds: float) -> str:
    if not seconds:
        return "--:--"
    total = int(round(seconds))
    return f"{total // 60}:{total % 60:02d}"


def _url(server_url: str, path: str) -> str:
    return server_url.rstrip("/") + path


def _json_or_raise(response: Any) -> Any:
    if not response.ok:
        try:
            payload = response.json()
        except ValueError:
            payload = response.text
        detail = payload.get("detail", payload) if isinstance(payload, dict) else payload
        raise CatalogClientError(response.status_code, detail)
    return response.json()
