from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

from typer.testing import CliRunner

from conftest import make_mp3_bytes
from song_catalog import cli
from song_catalog.interfaces import cli_handlers

runner = CliRunner()


def _response(status_code: int, payload) -> SimpleNamespace:
    return SimpleNamespace(ok=200 <= status_code < 300, status_code=status_code, json=lambda: payload, text=str(payload))


def test_songs_command_lists_catalog(monkeypatch) -> None:
    captured = {}

    def fake_get(url, *, timeout):
        captured["url"] = url
        captured["timeout"] = timeout
        return _response(
            200,
            [
                {"id": "a1", "name": "Track", "artist": "Unknown Artist", "durationSeconds": 185.2},
                {"id": "b2", "name": "Other", "artist": "Band", "durationSeconds": 0},
            ],
        )

    monkeypatch.setattr(cli_handlers.requests, "get", fake_get)

    result = runner.invoke(cli.app, ["songs", "--server", "http://catalog.local:3000/"])

    assert result.exit_code == 0
    assert captured == {"url": "http://catalog.local:3000/api/songs", "timeout": cli_handlers.FETCH_TIMEOUT_SECONDS}
    assert "1. Track - Unknown Artist [3:05] id=a1" in result.output
    assert "2. Other - Band [--:--] id=b2" in result.output


def test_upload_command_posts_multipart(monkeypatch, tmp_path: Path) -> None:
    audio = tmp_path / "song.mp3"
    audio.write_bytes(make_mp3_bytes())
    captured = {}

    def fake_post(url, *, files, data, timeout):
        filename, handle, content_type = files["audio"]
        captured.update(url=url, filename=filename, content_type=content_type, data=data, timeout=timeout)
        return _response(200, {"success": True, "song": {"id": "x9", "name": "Hit", "artist": "Me"}})

    monkeypatch.setattr(cli_handlers.requests, "post", fake_post)

    result = runner.invoke(cli.app, ["upload", str(audio), "--name", "Hit", "--artist", "Me"])

    assert result.exit_code == 0
    assert captured["url"] == "http://localhost:3000/api/upload"
    assert captured["filename"] == "song.mp3"
    assert captured["content_type"] == "audio/mpeg"
    assert captured["data"] == {"name": "Hit", "artist": "Me"}
    assert captured["timeout"] == cli_handlers.UPLOAD_TIMEOUT_SECONDS
    assert "[OK] Uploaded Hit - Me id=x9" in result.output


def test_delete_command_fails_on_not_found(monkeypatch) -> None:
    def fake_delete(url, *, timeout):
        return _response(404, {"detail": {"code": "not_found", "message": "Song not found: zz"}})

    monkeypatch.setattr(cli_handlers.requests, "delete", fake_delete)

    result = runner.invoke(cli.app, ["delete", "zz"])

    assert result.exit_code == 1


def test_serve_command_runs_uvicorn_with_config(monkeypatch, tmp_path: Path) -> None:
    import uvicorn

    config_path = tmp_path / "catalog.json"
    config_path.write_text(
        '{"upload_dir": "%s", "snapshot_path": "%s", "port": 4100}'
        % ((tmp_path / "uploads").as_posix(), (tmp_path / "songs.json").as_posix()),
        encoding="utf-8",
    )
    captured = {}

    def fake_run(app, *, host, port, log_level):
        captured.update(app=app, host=host, port=port, log_level=log_level)

    monkeypatch.setattr(uvicorn, "run", fake_run)

    result = runner.invoke(cli.app, ["serve", "--config", str(config_path), "--log-level", "warning"])

    assert result.exit_code == 0
    assert captured["port"] == 4100
    assert captured["host"] == "0.0.0.0"
    assert captured["log_level"] == "warning"
    assert captured["app"].title == "Song Catalog API"
    assert (tmp_path / "uploads").is_dir()
