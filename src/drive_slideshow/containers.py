"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from drive_slideshow.adapters.drive_client import HttpxDriveClient
from drive_slideshow.adapters.file_kv_store import JsonFileKeyValueStore
from drive_slideshow.adapters.google_oauth_client import HttpxGoogleOAuthClient
from drive_slideshow.adapters.supabase_kv_store import SupabaseKeyValueStore
from drive_slideshow.config import Settings
from drive_slideshow.domain.errors import ConfigurationMissingError
from drive_slideshow.services.aggregator import PhotoAggregator
from drive_slideshow.services.auth import AuthService
from drive_slideshow.services.drive import PhotoLister
from drive_slideshow.services.folders import FolderSelectionService
from drive_slideshow.services.preferences import DisplayPreferencesService
from drive_slideshow.services.slideshow import SlideshowController
from drive_slideshow.services.store import KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    photo_lister: PhotoLister
    auth_service: AuthService
    folder_service: FolderSelectionService
    preferences_service: DisplayPreferencesService
    aggregator: PhotoAggregator
    slideshow_controller: SlideshowController
    close_resources: Callable[[], Awaitable[None]]


def build_store(settings: Settings) -> KeyValueStore:
    """Create the key-value store selected by ``storage_backend``."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ConfigurationMissingError(
                "Supabase storage needs SUPABASE_URL and SUPABASE_SERVICE_KEY."
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseKeyValueStore(client=client, scope=settings.storage_scope)
    if settings.storage_backend == "file":
        return JsonFileKeyValueStore(
            path=Path(settings.storage_path), scope=settings.storage_scope
        )
    raise ConfigurationMissingError(
        f"Unknown storage backend {settings.storage_backend!r}"
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = build_store(resolved_settings)
    drive_client = HttpxDriveClient.create()
    oauth_client = HttpxGoogleOAuthClient.create(
        client_id=resolved_settings.google_client_id,
        client_secret=resolved_settings.google_client_secret,
        redirect_uri=resolved_settings.oauth_redirect_uri,
    )
    photo_lister = PhotoLister(
        client=drive_client,
        thumbnail_width=resolved_settings.thumbnail_width,
        page_size=resolved_settings.drive_page_size,
        follow_pages=resolved_settings.drive_follow_pages,
    )
    auth_service = AuthService(
        store=store,
        oauth_client=oauth_client,
        lister=photo_lister,
    )
    folder_service = FolderSelectionService(store)
    preferences_service = DisplayPreferencesService(store)
    aggregator = PhotoAggregator(lister=photo_lister, folders=folder_service)
    slideshow_controller = SlideshowController(
        auth_service=auth_service,
        aggregator=aggregator,
        slide_interval_seconds=resolved_settings.slide_interval_seconds,
        auth_poll_interval_seconds=resolved_settings.auth_poll_interval_seconds,
    )

    async def close_resources() -> None:
        await drive_client.close()
        await oauth_client.close()

    return AppContainer(
        settings=resolved_settings,
        store=store,
        photo_lister=photo_lister,
        auth_service=auth_service,
        folder_service=folder_service,
        preferences_service=preferences_service,
        aggregator=aggregator,
        slideshow_controller=slideshow_controller,
        close_resources=close_resources,
    )
