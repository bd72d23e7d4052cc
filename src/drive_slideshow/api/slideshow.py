"""Photo and slideshow control endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from fastapi import APIRouter, HTTPException, Request, Response, status

from drive_slideshow.api.models import PhotoOut, PhotosOut, SlideshowOut
from drive_slideshow.domain.errors import (
    ProviderRequestFailedError,
    UnauthenticatedError,
)

if TYPE_CHECKING:
    from drive_slideshow.containers import AppContainer
    from drive_slideshow.domain.drive import Photo
    from drive_slideshow.services.slideshow import SlideshowController

router = APIRouter(tags=["slideshow"])


def _photo_out(photo: Photo) -> PhotoOut:
    return PhotoOut(
        id=photo.id,
        name=photo.name,
        mime_type=photo.mime_type,
        preview_url=photo.preview_url,
        size=photo.size,
    )


def _slideshow_out(controller: SlideshowController) -> SlideshowOut:
    slideshow = controller.slideshow
    current = slideshow.current()
    return SlideshowOut(
        playing=slideshow.playing,
        index=slideshow.index,
        total=len(slideshow.photos),
        current=_photo_out(current) if current else None,
        error=controller.error,
        is_loading=controller.is_loading,
    )


@router.get("/photos")
async def list_photos(request: Request) -> PhotosOut:
    """Reload the photo sequence from the selected folders."""
    container: AppContainer = request.app.state.container
    controller = container.slideshow_controller
    await controller.reload_photos()
    return PhotosOut(
        photos=[_photo_out(photo) for photo in controller.slideshow.photos],
        failed_folder_ids=list(controller.failed_folder_ids),
        error=controller.error,
    )


@router.get("/photos/{photo_id}/content")
async def photo_content(photo_id: str, request: Request) -> Response:
    """Proxy a photo's bytes using the server-held bearer token."""
    container: AppContainer = request.app.state.container
    try:
        content = await container.photo_lister.fetch_photo_content(photo_id)
    except UnauthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc
    except (ProviderRequestFailedError, httpx.HTTPError) as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    media_type = "application/octet-stream"
    for photo in container.slideshow_controller.slideshow.photos:
        if photo.id == photo_id:
            media_type = photo.mime_type
            break
    return Response(content=content, media_type=media_type)


@router.get("/slideshow")
async def slideshow_state(request: Request) -> SlideshowOut:
    """Return the current slide and play state."""
    container: AppContainer = request.app.state.container
    return _slideshow_out(container.slideshow_controller)


@router.post("/slideshow/{action}")
async def slideshow_action(action: str, request: Request) -> SlideshowOut:
    """Apply a play, pause, next or previous action."""
    container: AppContainer = request.app.state.container
    controller = container.slideshow_controller
    if action == "play":
        controller.play()
    elif action == "pause":
        controller.pause()
    elif action == "next":
        controller.slideshow.next()
    elif action == "previous":
        controller.slideshow.previous()
    else:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _slideshow_out(controller)
