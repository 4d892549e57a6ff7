"""CLI interface for the song catalog."""

import logging
from pathlib import Path

import typer

from .interfaces.cli_handlers import (
    DEFAULT_SERVER_URL,
    CatalogClientError,
    delete_song,
    fetch_songs,
    format_duration,
    upload_song_file,
)
from .utils.config import load_catalog_config, load_catalog_config_from_env

app = typer.Typer(help="Song catalog command line interface")

SERVER_OPTION = typer.Option(
    DEFAULT_SERVER_URL,
    "--server",
    "-s",
    envvar="SONG_CATALOG_SERVER_URL",
    help="Base URL of a running catalog server.",
)


@app.command("serve")
def serve_command(
    host: str | None = typer.Option(None, "--host", help="Bind address (defaults to config)."),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port (defaults to config)."),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Optional JSON/YAML config file; environment variables are used otherwise.",
    ),
    log_level: str = typer.Option("info", "--log-level", help="Python logging level."),
) -> None:
    """Run the catalog HTTP/WebSocket server."""

    import uvicorn

    from .api import create_app

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = load_catalog_config(config_path) if config_path else load_catalog_config_from_env()
    uvicorn.run(
        create_app(config),
        host=host or config.host,
        port=port or config.port,
        log_level=log_level.lower(),
    )


@app.command("songs")
def songs_command(server: str = SERVER_OPTION) -> None:
    """List songs in the catalog."""

    try:
        songs = fetch_songs(server)
    except CatalogClientError as error:
        typer.echo(f"[FAILED] {error}", err=True)
        raise typer.Exit(code=1) from error

    if not songs:
        typer.echo("No songs uploaded yet.")
        return
    for index, song in enumerate(songs, start=1):
        typer.echo(
            f"{index}. {song['name']} - {song['artist']} "
            f"[{format_duration(song.get('durationSeconds', 0))}] id={song['id']}"
        )


@app.command("upload")
def upload_command(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Audio file to upload."),
    name: str | None = typer.Option(None, "--name", "-n", help="Song title (defaults to file name)."),
    artist: str | None = typer.Option(None, "--artist", "-a", help="Artist name."),
    server: str = SERVER_OPTION,
) -> None:
    """Upload an audio file to the catalog."""

    try:
        result = upload_song_file(path, name=name, artist=artist, server_url=server)
    except CatalogClientError as error:
        typer.echo(f"[FAILED] {error}", err=True)
        raise typer.Exit(code=1) from error

    song = result["song"]
    typer.echo(f"[OK] Uploaded {song['name']} - {song['artist']} id={song['id']}")


@app.command("delete")
def delete_command(
    song_id: str = typer.Argument(..., help="Id of the song to delete."),
    server: str = SERVER_OPTION,
) -> None:
    """Delete a song and its audio file."""

    try:
        delete_song(song_id, server_url=server)
    except CatalogClientError as error:
        typer.echo(f"[FAILED] {error}", err=True)
        raise typer.Exit(code=1) from error

    typer.echo(f"[OK] Deleted song id={song_id}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
