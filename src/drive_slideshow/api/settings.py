"""Settings endpoints: shared folder, folder selection and display options."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from drive_slideshow.api.models import (
    DisplayPreferencesIn,
    DisplayPreferencesOut,
    FolderOut,
    FolderSelectionIn,
    FolderUrlIn,
    SettingsOut,
)
from drive_slideshow.domain.errors import (
    InvalidFolderUrlError,
    PhotosNotConfiguredError,
    ProviderRequestFailedError,
    UnauthenticatedError,
)

if TYPE_CHECKING:
    from drive_slideshow.containers import AppContainer

router = APIRouter(tags=["settings"])


async def _settings_out(container: AppContainer) -> SettingsOut:
    selection = await container.folder_service.get_selection()
    preferences = await container.preferences_service.get_preferences()
    return SettingsOut(
        root_folder_url=selection.root_folder_url,
        selected_folder_ids=list(selection.selected_folder_ids),
        display=DisplayPreferencesOut(
            show_email=preferences.show_email,
            show_controls=preferences.show_controls,
            show_photo_counter=preferences.show_photo_counter,
            top_bar_opacity=preferences.top_bar_opacity,
        ),
    )


@router.get("/settings")
async def get_settings(request: Request) -> SettingsOut:
    """Return the folder selection and display preferences."""
    container: AppContainer = request.app.state.container
    return await _settings_out(container)


@router.put("/settings/folder-url")
async def save_folder_url(payload: FolderUrlIn, request: Request) -> SettingsOut:
    """Save the shared folder URL and reload the slideshow."""
    container: AppContainer = request.app.state.container
    try:
        await container.folder_service.save_root_folder_url(payload.url)
    except InvalidFolderUrlError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    if container.auth_service.is_signed_in():
        await container.slideshow_controller.reload_photos()
    return await _settings_out(container)


@router.put("/settings/folders")
async def save_selected_folders(
    payload: FolderSelectionIn, request: Request
) -> SettingsOut:
    """Replace the selected folders and reload the slideshow."""
    container: AppContainer = request.app.state.container
    await container.folder_service.set_selected_folder_ids(payload.folder_ids)
    if container.auth_service.is_signed_in():
        await container.slideshow_controller.reload_photos()
    return await _settings_out(container)


@router.put("/settings/display")
async def save_display(payload: DisplayPreferencesIn, request: Request) -> SettingsOut:
    """Apply a partial update to the display preferences."""
    container: AppContainer = request.app.state.container
    preferences = container.preferences_service
    if payload.show_email is not None:
        await preferences.set_show_email(payload.show_email)
    if payload.show_controls is not None:
        await preferences.set_show_controls(payload.show_controls)
    if payload.show_photo_counter is not None:
        await preferences.set_show_photo_counter(payload.show_photo_counter)
    if payload.top_bar_opacity is not None:
        await preferences.set_top_bar_opacity(payload.top_bar_opacity)
    return await _settings_out(container)


@router.get("/folders")
async def list_folders(request: Request) -> dict[str, list[FolderOut]]:
    """Return the sub-folders of the shared root folder."""
    container: AppContainer = request.app.state.container
    try:
        folders = await container.aggregator.list_root_subfolders()
    except UnauthenticatedError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc
    except (PhotosNotConfiguredError, InvalidFolderUrlError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    except ProviderRequestFailedError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)
        ) from exc
    return {"folders": [FolderOut(id=folder.id, name=folder.name) for folder in folders]}
