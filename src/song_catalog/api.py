"""FastAPI interface for the song catalog."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .application.audio_storage import DurationProbe
from .domain.errors import NotFound, StorageWriteFailed, UploadRejected, UploadTimedOut
from .domain.policies import media_type_for
from .interfaces.api_handlers import CatalogServices, build_services
from .interfaces.multipart_upload import MultipartUploadStream
from .utils.config import CatalogConfig, load_catalog_config_from_env

logger = logging.getLogger(__name__)

router = APIRouter()


def get_services(request: Request) -> CatalogServices:
    return request.app.state.services


def correlation_id_for(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


@router.get("/health")
async def health(services: CatalogServices = Depends(get_services)) -> dict[str, Any]:
    """Health check endpoint."""

    return {
        "status": "ok",
        "songs": len(services.store),
        "subscribers": services.notifier.subscriber_count,
    }


@router.get("/api/songs")
async def list_songs(services: CatalogServices = Depends(get_services)) -> list[dict[str, Any]]:
    """Every song record in upload order."""

    return [record.to_json_dict() for record in services.store.list()]


@router.post("/api/upload")
async def upload_song(request: Request, services: CatalogServices = Depends(get_services)) -> dict[str, Any]:
    """Validate, store and catalog an uploaded audio file.

    Multipart body with an ``audio`` file part and optional ``name`` and
    ``artist`` fields. The file is validated while it streams in.
    """

    try:
        upload = MultipartUploadStream(request.stream(), request.headers.get("content-type"))
        await _open_upload(upload, services.config.upload_timeout_seconds)
        record = await services.upload_song.run(
            upload.read,
            filename=upload.filename,
            content_type=upload.content_type,
            correlation_id=correlation_id_for(request),
            form_fields=upload.remaining_fields,
        )
    except UploadRejected as error:
        raise HTTPException(status_code=400, detail=error.as_dict()) from error
    except StorageWriteFailed as error:
        logger.error("Upload could not be stored", extra={"code": error.code}, exc_info=error)
        raise HTTPException(
            status_code=500,
            detail={"code": error.code, "message": "Failed to upload song"},
        ) from error

    return {"success": True, "message": "Song uploaded successfully!", "song": record.to_json_dict()}


async def _open_upload(upload: MultipartUploadStream, timeout_seconds: float) -> None:
    try:
        await asyncio.wait_for(upload.open_file(), timeout=timeout_seconds)
    except asyncio.TimeoutError as error:
        raise UploadTimedOut(f"Upload was not received within {timeout_seconds:g} seconds.") from error


@router.delete("/api/songs/{song_id}")
async def delete_song(
    song_id: str,
    request: Request,
    services: CatalogServices = Depends(get_services),
) -> dict[str, Any]:
    """Remove a song and its audio file."""

    try:
        await services.delete_song.run(song_id, correlation_id=correlation_id_for(request))
    except NotFound as error:
        raise HTTPException(status_code=404, detail=error.as_dict()) from error
    except StorageWriteFailed as error:
        logger.error("Song file could not be deleted", extra={"song_id": song_id}, exc_info=error)
        raise HTTPException(
            status_code=500,
            detail={"code": error.code, "message": "Failed to delete song"},
        ) from error

    return {"success": True, "message": "Song deleted successfully"}


@router.get("/uploads/{stored_filename}")
def fetch_upload(stored_filename: str, services: CatalogServices = Depends(get_services)) -> FileResponse:
    """Raw audio bytes for a stored file."""

    path = services.file_storage.resolve(stored_filename)
    if path is None:
        raise HTTPException(
            status_code=404,
            detail=NotFound(f"File not found: {stored_filename}").as_dict(),
        )
    return FileResponse(path, media_type=media_type_for(path.name))


@router.websocket("/ws")
async def change_feed(websocket: WebSocket) -> None:
    """Push songAdded/songDeleted hints; clients re-fetch /api/songs."""

    services: CatalogServices = websocket.app.state.services
    await websocket.accept()
    handle = services.notifier.subscribe(websocket.send_json)
    try:
        await websocket.send_json({"type": "connected", "subscriberId": handle.subscriber_id})
        while True:
            # Text and bytes frames from the client are ignored.
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    except WebSocketDisconnect:
        pass
    finally:
        services.notifier.unsubscribe(handle)
        logger.debug("Change feed client disconnected", extra={"subscriber_id": handle.subscriber_id})


class CorrelationIdMiddleware:
    """Echo ``X-Correlation-Id`` on every HTTP response, generating one when absent.

    Plain ASGI so the request body reaches the upload route unbuffered.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        correlation_id = Headers(scope=scope).get("x-correlation-id") or str(uuid4())
        scope.setdefault("state", {})["correlation_id"] = correlation_id

        async def send_with_correlation_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)["X-Correlation-Id"] = correlation_id
            await send(message)

        await self.app(scope, receive, send_with_correlation_id)


def create_app(config: CatalogConfig | None = None, *, probe: DurationProbe | None = None) -> FastAPI:
    """Build an API instance that owns its own store, storage and notifier."""

    services = build_services(config or load_catalog_config_from_env(), probe=probe)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        await services.store.load()
        yield
        await services.notifier.drain()

    application = FastAPI(title="Song Catalog API", version="0.1.0", lifespan=lifespan)
    application.state.services = services

    application.add_middleware(CorrelationIdMiddleware)
    application.include_router(router)
    return application


def __getattr__(name: str) -> Any:
    # ``app`` is built on first access so importing this module has no side effects.
    if name == "app":
        value = create_app()
        globals()["app"] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
